"""
WSGI Entry Point for the Acquity marketplace

This module serves as the entry point for WSGI servers (like Gunicorn)
to run the Flask application in production environments.

PRODUCTION REQUIREMENTS:
- All environment variables must be set BEFORE this module is imported
- The store backend credentials are checked during application creation
- Missing environment variables cause immediate failure with clear messages
"""

import os
import sys

from dotenv import load_dotenv

# .env is a local development convenience only. In production, environment
# variables must be provided by the platform.
if os.environ.get('FLASK_ENV', '').lower() != 'production' and os.environ.get('FLASK_CONFIG', '').lower() != 'production':
    load_dotenv(override=False)

from marketplace import create_app

# Local/dev defaults to development; hosted deployments set FLASK_CONFIG=production.
config_name = (os.getenv('FLASK_CONFIG') or os.getenv('FLASK_ENV') or 'development').lower()

print(f'Initializing Acquity with config: {config_name}', file=sys.stderr)


def missing_production_vars(environ=os.environ):
    """Names and descriptions of required production variables that are unset."""

    required_vars = {
        'SECRET_KEY': 'Required for session signing and CSRF protection',
    }
    if environ.get('STORE_BACKEND', 'supabase').lower() == 'supabase':
        required_vars['SUPABASE_URL'] = 'Required to reach the Supabase project'
        if not environ.get('SUPABASE_ANON_KEY'):
            required_vars['SUPABASE_SERVICE_ROLE_KEY'] = 'Required for server-side Supabase access'
    else:
        required_vars['DATABASE_URL'] = 'Required for the SQL store'

    return [
        f"  {name}: {description}"
        for name, description in required_vars.items()
        if not environ.get(name)
    ]


if config_name == 'production':
    missing_vars = missing_production_vars()
    if missing_vars:
        error_msg = (
            "\n" + "=" * 70 + "\n"
            "DEPLOYMENT FAILED: Missing required environment variables\n"
            + "=" * 70 + "\n\n"
            + "\n".join(missing_vars)
            + "\n\n"
            "Set these in your hosting dashboard and redeploy.\n"
            + "=" * 70 + "\n"
        )
        print(error_msg, file=sys.stderr)
        raise RuntimeError('Missing required environment variables in production')

    print('All required environment variables present', file=sys.stderr)

try:
    app = create_app(config_name)
    print('Flask application created successfully', file=sys.stderr)
except Exception as exc:
    print(f'\n{"=" * 70}', file=sys.stderr)
    print('FATAL: Application initialization failed', file=sys.stderr)
    print(f'\nError: {exc}', file=sys.stderr)
    print('\nCommon causes:', file=sys.stderr)
    print('  1. Missing or invalid Supabase credentials (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)', file=sys.stderr)
    print('  2. Missing database tables for the SQL store (run: flask db upgrade)', file=sys.stderr)
    print('  3. Invalid environment variable values', file=sys.stderr)
    print(f'\n{"=" * 70}\n', file=sys.stderr)
    raise
