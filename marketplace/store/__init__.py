"""
Listing accessor

One store object per application, picked by ``STORE_BACKEND``:

- ``supabase``: hosted backend (production)
- ``sql``: local Flask-SQLAlchemy tables (development, tests)
"""

from flask import current_app

from marketplace.store.errors import AuthError, DuplicateRecordError, StoreError


def create_store(app):
    backend = (app.config.get('STORE_BACKEND') or 'sql').lower()

    if backend == 'supabase':
        from marketplace.store.supabase_store import SupabaseStore

        url = app.config.get('SUPABASE_URL')
        key = app.config.get('SUPABASE_KEY')
        if not url or not key:
            raise RuntimeError('STORE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_KEY')
        store = SupabaseStore(url, key)
    elif backend == 'sql':
        from marketplace.store.sql_store import SqlStore

        store = SqlStore()
    else:
        raise RuntimeError(f'Unknown STORE_BACKEND: {backend}')

    app.extensions['store'] = store
    app.logger.info('Listing store backend: %s', store.backend)
    return store


def get_store():
    return current_app.extensions['store']


__all__ = ['AuthError', 'DuplicateRecordError', 'StoreError', 'create_store', 'get_store']
