"""
Configuration Module for the Acquity marketplace

Configuration classes per environment:
- DevelopmentConfig: local development, SQL store on SQLite
- ProductionConfig: hosted deployment, Supabase store
- TestingConfig: automated tests, SQL store
"""

import os
from pathlib import Path
from datetime import timedelta

from marketplace.seo.settings import resolve_base_url


def _env_bool(name, default='false'):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration with common settings"""

    # No insecure default; the app factory enforces presence in production.
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Listing / content store
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'sql').lower()
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    # Service role key; the anon key works for read-only deployments.
    SUPABASE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY') or os.environ.get('SUPABASE_ANON_KEY')

    # SQL store
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # Pagination
    LISTINGS_PER_PAGE = int(os.environ.get('LISTINGS_PER_PAGE', 12))
    FEATURED_LISTINGS_PER_TYPE = 3
    BLOG_POSTS_PER_PAGE = 12

    # Email configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@acquityapp.com')

    # Rate limiting (Flask-Limiter)
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    INQUIRY_RATE_LIMIT = os.environ.get('INQUIRY_RATE_LIMIT', '5 per minute')
    API_RATE_LIMIT = os.environ.get('API_RATE_LIMIT', '30 per minute')
    AUTH_RATE_LIMIT = os.environ.get('AUTH_RATE_LIMIT', '10 per minute')
    TRUST_PROXY_HEADERS = _env_bool('TRUST_PROXY_HEADERS')

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=720)
    SESSION_REFRESH_EACH_REQUEST = True

    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    REMEMBER_COOKIE_SECURE = True
    REMEMBER_COOKIE_HTTPONLY = True

    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # SEO Configuration
    SITE_NAME = 'Acquity'
    SITE_ORGANIZATION_NAME = 'Acquity - Global Business Marketplace'
    SITE_DESCRIPTION = (
        'Global marketplace for buying, selling, and investing in businesses across emerging markets.'
    )
    SITE_URL = resolve_base_url()
    SITE_KEYWORDS = 'businesses for sale, franchises for sale, investment opportunities, emerging markets'
    SUPPORT_EMAIL = os.environ.get('SUPPORT_EMAIL', 'support@acquityapp.com')

    # Inquiry notifications
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@acquityapp.com')


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True
    TESTING = False

    # SQLAlchemy sqlite URLs must use forward slashes (Windows).
    _project_root = Path(__file__).resolve().parent.parent
    _default_db_path = (_project_root / 'acquity.db').resolve()

    _env_db_url = os.environ.get('DATABASE_URL')
    if _env_db_url and _env_db_url.strip().startswith('sqlite:'):
        _env_db_url = _env_db_url.replace('\\', '/')

    SQLALCHEMY_DATABASE_URI = _env_db_url or f"sqlite:///{_default_db_path.as_posix()}"

    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    TESTING = False

    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'supabase').lower()

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Normalized DATABASE_URL, evaluated when the app is created.

        Only used when the SQL store is selected. Platform URLs use the
        ``postgres://`` scheme that SQLAlchemy rejects.
        """
        db_uri = os.environ.get('DATABASE_URL')
        if not db_uri:
            return None

        if db_uri.startswith('postgres://'):
            db_uri = 'postgresql://' + db_uri[len('postgres://'):]

        if db_uri.startswith('postgresql://') and 'sslmode=' not in db_uri:
            separator = '&' if '?' in db_uri else '?'
            db_uri = f"{db_uri}{separator}sslmode=require"

        return db_uri

    TRUST_PROXY_HEADERS = _env_bool('TRUST_PROXY_HEADERS', 'true')

    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True

    STORE_BACKEND = 'sql'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SITE_URL = 'https://acquityapp.com'
    SECRET_KEY = 'test-secret-key'

    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    MAIL_SUPPRESS_SEND = True

    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
