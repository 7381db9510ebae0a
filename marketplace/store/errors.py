"""Store exceptions shared by every backend."""


class StoreError(RuntimeError):
    """A data store call failed."""


class DuplicateRecordError(StoreError):
    """Insert rejected by a unique constraint."""


class AuthError(StoreError):
    """Authentication call rejected (bad credentials, unsupported provider, ...)."""
