# Weather Routes
from datetime import datetime

from flask import Blueprint, request, jsonify

from crop_support.utils.weather import get_weather

weather_bp = Blueprint('weather', __name__)


@weather_bp.route('', methods=['GET'])
def weather():
    location = request.args.get('location') or 'Delhi'
    return jsonify({
        'success': True,
        'weather': get_weather(location),
        'lastUpdated': datetime.utcnow().isoformat(),
    })
