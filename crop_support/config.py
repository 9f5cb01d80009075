# Application Configuration
import os
from pathlib import Path

basedir = Path(__file__).parent.parent


def _env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    APP_ENV = os.environ.get('APP_ENV', 'development')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = _env_list('CORS_ORIGINS', ['http://localhost:3000'])

    # Handle both PostgreSQL (Render) and an in-memory store (default)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        # Render provides postgres:// but SQLAlchemy needs postgresql://
        if database_url.startswith('postgres://'):
            database_url = database_url.replace('postgres://', 'postgresql://', 1)
        SQLALCHEMY_DATABASE_URI = database_url
    else:
        # State lives in process memory and resets on restart
        SQLALCHEMY_DATABASE_URI = 'sqlite://'

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload settings
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB request cap
    MAX_IMAGE_SIZE = int(os.environ.get('MAX_FILE_SIZE', 10 * 1024 * 1024))
    AI_MAX_IMAGE_SIZE = int(os.environ.get('MAX_IMAGE_SIZE', 5 * 1024 * 1024))
    ALLOWED_IMAGE_TYPES = ['image/jpeg', 'image/png', 'image/webp']
    DETECTION_DELAY = 1.5  # seconds of simulated image processing

    # OpenWeatherMap API
    WEATHER_API_KEY = os.environ.get('WEATHER_API_KEY') or None
    WEATHER_API_URL = 'https://api.openweathermap.org/data/2.5/weather'
    WEATHER_FORECAST_URL = 'https://api.openweathermap.org/data/2.5/forecast'

    # Mandi price aggregation (seconds)
    MANDI_UPDATE_INTERVAL = int(os.environ.get('MANDI_UPDATE_INTERVAL', 3600))
    MANDI_FETCH_DELAY = (1.0, 3.0)
    MANDI_FETCH_TIMEOUT = float(os.environ.get('MANDI_FETCH_TIMEOUT', 10))

    # Government schemes refresh (seconds)
    SCHEMES_UPDATE_INTERVAL = int(os.environ.get('SCHEMES_UPDATE_INTERVAL', 86400))
    SCHEME_UPDATE_DELAY = 2.0

    # Price alert subscriptions, keyed by user id
    PRICE_ALERTS = [
        {'userId': 1, 'crop': 'Wheat', 'state': 'Punjab', 'alertType': 'price_increase', 'percentage': 10},
        {'userId': 2, 'crop': 'Tomato', 'alertType': 'threshold', 'threshold': 1200},
    ]

    # Security
    JWT_SECRET = os.environ.get('JWT_SECRET') or SECRET_KEY
    JWT_EXPIRY_DAYS = int(os.environ.get('JWT_EXPIRY_DAYS', 7))
    BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', 12))

    SUPPORTED_LANGUAGES = ['en', 'hi', 'pa', 'bn', 'ta', 'te', 'mr', 'gu']
    CROP_TYPES = [
        'Rice', 'Wheat', 'Maize', 'Barley', 'Millet', 'Lentil', 'Chickpea',
        'Pigeon Pea', 'Black Gram', 'Soybean', 'Groundnut', 'Mustard',
        'Sunflower', 'Tomato', 'Potato', 'Onion', 'Cabbage', 'Cauliflower',
        'Mango', 'Banana', 'Apple', 'Orange', 'Grapes', 'Turmeric', 'Chili',
        'Coriander', 'Cumin', 'Cotton', 'Sugarcane', 'Tobacco', 'Jute',
    ]

    ENABLE_SCHEDULER = os.environ.get('ENABLE_SCHEDULER', '1') == '1'
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', '1') == '1'


class TestingConfig(Config):
    TESTING = True
    APP_ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    DETECTION_DELAY = 0
    MANDI_FETCH_DELAY = (0, 0)
    MANDI_FETCH_TIMEOUT = 5
    SCHEME_UPDATE_DELAY = 0
    PRICE_ALERTS = []
    BCRYPT_ROUNDS = 4
    ENABLE_SCHEDULER = False
    SEED_DEMO_DATA = False
