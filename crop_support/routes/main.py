# Main Routes
from datetime import datetime

from flask import Blueprint, jsonify

from crop_support.services import get_services

main_bp = Blueprint('main', __name__)

ENDPOINTS = [
    'POST /api/auth',
    'GET /api/auth',
    'GET|PATCH /api/users/<id>',
    'GET|POST /api/disease-detection',
    'GET /api/disease-detection/diseases',
    'GET|POST /api/government-schemes',
    'GET|POST /api/mandi-prices',
    'GET /api/weather',
    'GET /api/notifications',
    'GET /api/admin/analytics',
    'GET|POST /api/admin/tasks',
]


@main_bp.route('/')
def index():
    """Service banner"""
    return jsonify({
        'success': True,
        'service': 'Smart Crop Support API',
        'endpoints': ENDPOINTS,
    })


@main_bp.route('/api/health')
def health():
    services = get_services()
    store_ok = services.store.ping()
    return jsonify({
        'success': store_ok,
        'store': 'ok' if store_ok else 'unavailable',
        'tasks': services.tasks.status(),
        'mandiUpdate': services.aggregator.get_update_status(),
        'timestamp': datetime.utcnow().isoformat(),
    }), 200 if store_ok else 503
