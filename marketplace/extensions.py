"""
Flask Extensions Module

Extensions are created here and attached to the app in the factory.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_mail import Mail
from flask_limiter import Limiter


def _rate_limit_key() -> str:
	"""Client IP key for rate limiting.

	Honors the first X-Forwarded-For hop when the app runs behind the
	platform proxy (``TRUST_PROXY_HEADERS``).
	"""

	from flask import current_app, has_request_context, request

	if not has_request_context():
		return '0.0.0.0'

	if current_app.config.get('TRUST_PROXY_HEADERS'):
		forwarded = (request.headers.get('X-Forwarded-For') or '').split(',')[0].strip()
		if forwarded:
			return forwarded

	return request.remote_addr or '0.0.0.0'


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
mail = Mail()
limiter = Limiter(key_func=_rate_limit_key)

# Configure login manager
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page.'
login_manager.login_message_category = 'info'
login_manager.session_protection = 'strong'
