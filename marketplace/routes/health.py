"""
Health check endpoints for monitoring the application and its store.

Used by the hosting platform's health checks, uptime monitors and
post-deploy smoke tests.
"""

from flask import Blueprint, jsonify, current_app
from datetime import datetime
import os

from marketplace.store import StoreError, get_store


health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """
    Lightweight health check for load balancer probes.

    Returns 200 OK if the application is running. Does NOT touch the
    store to keep response time low.
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': 'acquity',
    }), 200


@health_bp.route('/health/ready')
def readiness_check():
    """
    Readiness check including store connectivity.

    Returns 200 OK only if the configured store backend answers a trivial
    query; 503 otherwise.
    """
    store = get_store()
    checks = {
        'application': 'healthy',
        'store': 'unknown',
        'store_backend': store.backend,
        'timestamp': datetime.utcnow().isoformat(),
    }

    status_code = 200

    try:
        store.ping()
        checks['store'] = 'healthy'
    except StoreError as exc:
        checks['store'] = 'unhealthy'
        checks['store_error'] = str(exc)
        status_code = 503
        current_app.logger.error('Store health check failed: %s', exc, exc_info=True)

    checks['overall'] = 'healthy' if status_code == 200 else 'unhealthy'

    return jsonify(checks), status_code


@health_bp.route('/health/live')
def liveness_check():
    """
    Liveness probe for container orchestration.

    Returns 200 OK if the process is alive.
    """
    return jsonify({
        'status': 'alive',
        'pid': os.getpid(),
        'timestamp': datetime.utcnow().isoformat(),
    }), 200
