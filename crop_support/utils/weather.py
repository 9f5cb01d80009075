# Weather Utility Functions
import logging
import os
from collections import Counter
from datetime import date, timedelta

import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

DEFAULT_WEATHER_URL = 'https://api.openweathermap.org/data/2.5/weather'
DEFAULT_FORECAST_URL = 'https://api.openweathermap.org/data/2.5/forecast'
FORECAST_DAYS = 3
REQUEST_TIMEOUT = 5


def _setting(name, default=None):
    if has_app_context():
        value = current_app.config.get(name)
        if value:
            return value
    return os.environ.get(name) or default


def get_weather(location='Delhi'):
    """
    Fetch weather data for a location using OpenWeatherMap API.

    Args:
        location: Location string (e.g., "Delhi" or "Karnal, IN")

    Returns:
        dict: {
            'location': str,
            'current': {temperature, humidity, windSpeed, condition, rainfall, uvIndex},
            'forecast': list of {date, maxTemp, minTemp, humidity, rainfall, condition},
            'farmingAdvice': list of str
        }
    """
    api_key = _setting('WEATHER_API_KEY')

    # If no API key, return mock data
    if not api_key:
        return _get_mock_weather(location)

    try:
        params = {'q': location, 'appid': api_key, 'units': 'metric'}
        response = requests.get(_setting('WEATHER_API_URL', DEFAULT_WEATHER_URL), params=params,
                                timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        data = response.json()

        current = {
            'temperature': round(data['main']['temp'], 1),
            'humidity': data['main']['humidity'],
            'windSpeed': round(data['wind']['speed'] * 3.6, 1),  # m/s to km/h
            'condition': data['weather'][0]['main'],
            'rainfall': data.get('rain', {}).get('1h', 0),
            'uvIndex': None,
        }
        forecast = _get_forecast(location, api_key)
    except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as e:
        logger.warning('Weather lookup for %s failed, using mock data: %s', location, e)
        return _get_mock_weather(location)

    return {
        'location': location,
        'current': current,
        'forecast': forecast,
        'farmingAdvice': farming_advice(current, forecast),
    }


def _get_forecast(location, api_key):
    """Daily summaries from the 3-hour forecast feed"""
    params = {'q': location, 'appid': api_key, 'units': 'metric'}
    response = requests.get(_setting('WEATHER_FORECAST_URL', DEFAULT_FORECAST_URL), params=params,
                            timeout=REQUEST_TIMEOUT)
    response.raise_for_status()

    days = {}
    for item in response.json().get('list', []):
        day = item['dt_txt'].split(' ')[0]
        days.setdefault(day, []).append(item)

    forecast = []
    for day, items in list(days.items())[:FORECAST_DAYS]:
        conditions = Counter(item['weather'][0]['main'] for item in items)
        forecast.append({
            'date': day,
            'maxTemp': round(max(item['main']['temp_max'] for item in items), 1),
            'minTemp': round(min(item['main']['temp_min'] for item in items), 1),
            'humidity': round(sum(item['main']['humidity'] for item in items) / len(items)),
            'rainfall': round(sum(item.get('rain', {}).get('3h', 0) for item in items), 1),
            'condition': conditions.most_common(1)[0][0],
        })
    return forecast


def farming_advice(current, forecast):
    advice = []
    upcoming_rain = sum(day['rainfall'] for day in forecast[1:3])

    if not current.get('rainfall'):
        advice.append('Good conditions for irrigation today')
    if upcoming_rain > 0:
        advice.append('Expected rainfall in next 2 days - delay watering')
    if current.get('humidity', 0) >= 65:
        advice.append('High humidity may increase disease risk - monitor crops closely')
    if current.get('temperature', 0) >= 35:
        advice.append('High temperature - irrigate in the early morning or evening to limit heat stress')
    if current.get('windSpeed', 0) >= 25:
        advice.append('Strong winds - postpone pesticide and fertilizer spraying')
    return advice


def _get_mock_weather(location):
    """Return mock weather data when API is not available"""
    today = date.today()
    current = {
        'temperature': 28,
        'humidity': 65,
        'windSpeed': 12,
        'condition': 'Partly Cloudy',
        'rainfall': 0,
        'uvIndex': 6,
    }
    forecast = [
        {'date': today.isoformat(), 'maxTemp': 32, 'minTemp': 24, 'humidity': 70,
         'rainfall': 5, 'condition': 'Light Rain'},
        {'date': (today + timedelta(days=1)).isoformat(), 'maxTemp': 30, 'minTemp': 22, 'humidity': 75,
         'rainfall': 12, 'condition': 'Moderate Rain'},
        {'date': (today + timedelta(days=2)).isoformat(), 'maxTemp': 29, 'minTemp': 21, 'humidity': 80,
         'rainfall': 8, 'condition': 'Cloudy'},
    ]
    return {
        'location': location,
        'current': current,
        'forecast': forecast,
        'farmingAdvice': farming_advice(current, forecast),
    }
