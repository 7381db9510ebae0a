"""Local development server.

Creates missing tables for the SQL store, then starts Flask's
development server. Production deployments use ``wsgi:app`` behind
Gunicorn instead.
"""

import os

from wsgi import app
from marketplace.extensions import db


if __name__ == '__main__':
    if app.extensions['store'].backend == 'sql':
        with app.app_context():
            db.create_all()

    host = os.environ.get('HOST', '127.0.0.1')
    port = int(os.environ.get('PORT', 5000))
    app.run(host=host, port=port)
