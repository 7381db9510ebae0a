"""Test configuration and fixtures."""

import os
import tempfile
import uuid
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from marketplace import create_app
from marketplace.extensions import db as _db
from marketplace.models import BlogPost
from marketplace.seo.slugs import create_slug, generate_listing_slug
from marketplace.store import get_store


@pytest.fixture
def app():
    """Create application for testing."""
    db_fd, db_path = tempfile.mkstemp()

    app = create_app({
        'TESTING': True,
        'STORE_BACKEND': 'sql',
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'SITE_URL': 'https://acquityapp.com',
    })

    with app.app_context():
        _db.create_all()

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()

    os.close(db_fd)
    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def store(app):
    """SQL store inside an application context (no requests)."""
    with app.app_context():
        yield get_store()


@pytest.fixture
def make_listing(app):
    """Insert a listing with its financial row; returns the listing dict."""

    def _make(listing_type='business_sale', title='Coffee Roastery', status='approved',
              financials=None, age_days=0, **fields):
        listing_id = str(uuid.uuid4())
        values = {
            'id': listing_id,
            'slug': generate_listing_slug(title, listing_id),
            'title': title,
            'status': status,
            'created_at': datetime.utcnow() - timedelta(days=age_days),
        }
        values.update(fields)
        with app.app_context():
            return get_store().create_listing(listing_type, values, financials)

    return _make


@pytest.fixture
def make_post(app):
    def _make(title='Valuing a Business', status='published', age_days=0, **fields):
        with app.app_context():
            post = BlogPost(
                title=title,
                slug=fields.pop('slug', None) or create_slug(title),
                status=status,
                created_at=datetime.utcnow() - timedelta(days=age_days),
                **fields,
            )
            _db.session.add(post)
            _db.session.commit()
            return post.to_dict()

    return _make


@pytest.fixture
def make_user(app):
    """Register a password user through the store."""

    def _make(email='buyer@example.com', password='secret123', full_name='Ada Buyer'):
        with app.app_context():
            return get_store().sign_up(email, password, metadata={'full_name': full_name})

    return _make


@pytest.fixture
def login(client, make_user):
    """Create a user and log the test client in."""

    def _login(email='buyer@example.com', password='secret123', full_name='Ada Buyer'):
        user = make_user(email=email, password=password, full_name=full_name)
        resp = client.post('/login', data={'email': email, 'password': password})
        assert resp.status_code == 302
        return user

    return _login
