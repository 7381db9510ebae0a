"""
Flask Application Factory

Builds the marketplace app for a named configuration ('development',
'production', 'testing') or for a mapping of config overrides (tests).
"""

import json
import os
from collections.abc import Mapping

from flask import Flask, render_template
from markupsafe import Markup

from marketplace.config import config
from marketplace.extensions import db, migrate, login_manager, mail, limiter
from marketplace.seo import init_seo, get_seo
from marketplace.store import create_store


def _load_config(app, config_name):
    """Apply a named config class, or TestingConfig plus overrides for a mapping."""

    if isinstance(config_name, Mapping):
        overrides = dict(config_name)
        base = overrides.pop('CONFIG_NAME', 'testing' if overrides.get('TESTING') else 'default')
        name = base.lower()
    else:
        overrides = {}
        name = (config_name or 'default').lower()

    # Instantiate so @property values (ProductionConfig.SQLALCHEMY_DATABASE_URI) are evaluated.
    cfg = config.get(name) or config['default']
    cfg_obj = cfg() if isinstance(cfg, type) else cfg
    app.config.from_object(cfg_obj)
    app.config.update(overrides)
    return name


def _check_production_config(app):
    if not app.config.get('SECRET_KEY'):
        app.logger.error('Production requires SECRET_KEY to be set via environment variable')
        raise RuntimeError('Missing SECRET_KEY in production')

    backend = app.config.get('STORE_BACKEND')
    if backend == 'supabase':
        if not app.config.get('SUPABASE_URL') or not app.config.get('SUPABASE_KEY'):
            app.logger.error('Production requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY')
            raise RuntimeError('Missing Supabase credentials in production')
    elif backend == 'sql':
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if not db_uri:
            app.logger.error('Production SQL store requires DATABASE_URL to be set')
            raise RuntimeError('Missing DATABASE_URL in production')
        if db_uri.strip().startswith('sqlite:'):
            app.logger.error('Production requires PostgreSQL (DATABASE_URL must not be sqlite): %s', db_uri)
            raise RuntimeError('SQLite not allowed in production')


def create_app(config_name='default'):
    """
    Application factory function

    Args:
        config_name: configuration name ('development', 'production',
            'testing') or a mapping of config overrides

    Returns:
        Flask: Configured Flask application instance
    """

    app = Flask(__name__)
    config_name = _load_config(app, config_name)

    if config_name == 'production':
        _check_production_config(app)
    elif not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = os.urandom(32)
        app.logger.warning('SECRET_KEY was missing; generated an ephemeral key for this process.')

    # Flask-SQLAlchemy refuses to start without a URI, even when Supabase serves every read.
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)
    limiter.init_app(app)

    import marketplace.models  # noqa: F401  (table metadata for migrations / create_all)
    import marketplace.session_user  # noqa: F401  (registers the user loader)

    init_seo(app)
    create_store(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_template_processors(app)
    register_shell_context(app)
    register_cli_commands(app)

    @app.after_request
    def _apply_security_headers(response):
        """Apply safe security headers without affecting app logic."""
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; "
            "form-action 'self' https://*.supabase.co; "
            "frame-ancestors 'none'; "
            "img-src 'self' data: https:; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
            "font-src 'self' https://fonts.gstatic.com; "
            "connect-src 'self';"
        )
        response.headers.setdefault('Content-Security-Policy', csp)
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
        response.headers.setdefault('Permissions-Policy', 'geolocation=(), microphone=(), camera=()')
        return response

    @app.teardown_appcontext
    def _cleanup_appcontext(exc):
        """Ensure scoped sessions are removed when the app context ends."""
        db.session.remove()

    @app.route('/favicon.ico')
    def favicon_placeholder():  # pragma: no cover - trivial route
        return ('', 204)

    return app


def register_blueprints(app):
    """Register Flask blueprints"""

    from marketplace.routes.main import main_bp
    from marketplace.routes.listings import listings_bp
    from marketplace.routes.blog import blog_bp
    from marketplace.routes.auth import auth_bp
    from marketplace.routes.api import api_bp
    from marketplace.routes.health import health_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(listings_bp)
    app.register_blueprint(blog_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(health_bp)  # No prefix - accessible at /health


def register_error_handlers(app):
    """Register error handlers for common HTTP errors"""

    def _error_meta(title, description):
        return get_seo().meta.generate_meta(title, description, noindex=True, nofollow=True)

    @app.errorhandler(404)
    def not_found_error(error):
        meta = _error_meta('Page not found', 'The page you are looking for does not exist.')
        return render_template('errors/404.html', meta=meta), 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.exception('Unhandled exception (500): %s', error)
        db.session.rollback()
        meta = _error_meta('Something went wrong', 'An unexpected error occurred.')
        return render_template('errors/500.html', meta=meta), 500

    @app.errorhandler(403)
    def forbidden_error(error):
        meta = _error_meta('Access denied', 'You do not have access to this page.')
        return render_template('errors/403.html', meta=meta), 403

    @app.errorhandler(429)
    def rate_limited(error):
        from flask import jsonify, request

        if request.path.startswith('/api/') or request.is_json:
            return jsonify({'error': 'Too many requests. Please try again shortly.'}), 429
        meta = _error_meta('Too many requests', 'Please wait a moment and try again.')
        return render_template('errors/429.html', meta=meta), 429


def register_template_processors(app):
    """Register context processors and filters for templates"""

    @app.template_filter('jsonld')
    def jsonld_filter(data):
        """Serialize a JSON-LD object for a <script> tag."""
        payload = json.dumps(data, ensure_ascii=False).replace('</', '<\\/')
        return Markup(payload)

    @app.template_filter('money')
    def money_filter(value):
        if value in (None, ''):
            return 'Contact seller'
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return str(value)
        if amount >= 1_000_000:
            return f"${amount / 1_000_000:.1f}M"
        if amount >= 1_000:
            return f"${amount / 1_000:.0f}K"
        return f"${amount:,.0f}"

    @app.context_processor
    def inject_site_config():
        """Inject site configuration into all templates"""
        from marketplace.seo.url_mapping import LISTING_TYPES, TYPE_LABELS, generate_clean_url, listing_detail_path

        seo = get_seo()
        return {
            'site_name': app.config['SITE_NAME'],
            'site_description': app.config['SITE_DESCRIPTION'],
            'site_url': seo.settings.base_url,
            'site_keywords': app.config.get('SITE_KEYWORDS', ''),
            'support_email': seo.settings.support_email,
            'organization_schema': seo.schema.generate_organization_schema(),
            'website_schema': seo.schema.generate_website_schema(),
            'listing_types': LISTING_TYPES,
            'type_labels': TYPE_LABELS,
            'clean_url': generate_clean_url,
            'listing_url': listing_detail_path,
        }


def register_shell_context(app):
    """Register shell context for Flask CLI"""

    @app.shell_context_processor
    def make_shell_context():
        from marketplace.models import Listing, BlogPost, BuyerContact, NewsletterSubscriber, User, Profile
        from marketplace.store import get_store
        return {
            'db': db,
            'store': get_store(),
            'Listing': Listing,
            'BlogPost': BlogPost,
            'BuyerContact': BuyerContact,
            'NewsletterSubscriber': NewsletterSubscriber,
            'User': User,
            'Profile': Profile,
        }


def register_cli_commands(app):
    """Register custom Flask CLI commands."""
    from marketplace.cli import init_db_command, seed_demo_command

    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_demo_command)
