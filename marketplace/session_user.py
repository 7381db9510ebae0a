"""
Flask-Login wrapper around store identities.

Accounts live in the store backend, not in this app, so the signed session
keeps a small snapshot (id, email, name) that the user loader rebuilds.
"""

from flask import session
from flask_login import UserMixin, login_user

from marketplace.extensions import login_manager


SESSION_KEY = 'auth_user'


class SessionUser(UserMixin):

    def __init__(self, id, email, full_name=''):
        self.id = str(id)
        self.email = email
        self.full_name = full_name or ''

    @property
    def display_name(self):
        return self.full_name or (self.email or '').split('@')[0]

    def to_session(self):
        return {'id': self.id, 'email': self.email, 'full_name': self.full_name}

    @classmethod
    def from_payload(cls, payload):
        return cls(payload['id'], payload.get('email'), payload.get('full_name'))

    def __repr__(self):
        return f'<SessionUser {self.email}>'


def sign_in_user(payload, remember=False):
    """Log a store user payload into the Flask session."""
    user = SessionUser.from_payload(payload)
    session[SESSION_KEY] = user.to_session()
    login_user(user, remember=remember)
    return user


def update_session_user(**fields):
    """Patch the signed-in snapshot after the user edits their details."""
    data = dict(session.get(SESSION_KEY) or {})
    data.update(fields)
    session[SESSION_KEY] = data


@login_manager.user_loader
def load_user(user_id):
    data = session.get(SESSION_KEY)
    if not data or data.get('id') != user_id:
        return None
    return SessionUser.from_payload(data)
