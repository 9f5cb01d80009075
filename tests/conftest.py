from datetime import date, timedelta

import pytest
from flask.testing import FlaskClient

from crop_support import create_app
from crop_support.config import TestingConfig
from crop_support.models import db, User, MandiPrice, GovernmentScheme
from crop_support.services import get_services
from crop_support.utils.security import create_access_token


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    get_services(app).tasks.shutdown()


class _FreshContextClient(FlaskClient):
    # Each request gets its own app context so Flask-Login's cached user in `g`
    # does not leak from the fixture's long-lived context into later requests.
    def open(self, *args, **kwargs):
        with self.application.app_context():
            return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    app.test_client_class = _FreshContextClient
    return app.test_client()


@pytest.fixture
def services(app):
    return get_services(app)


@pytest.fixture
def store(services):
    return services.store


def day(offset=0):
    return (date.today() + timedelta(days=offset)).isoformat()


def add_price(store, crop, modal, market='Karnal Mandi', state='Haryana', price_date=None, source='AgMarkNet'):
    return store.create(
        MandiPrice,
        crop=crop,
        market=market,
        state=state,
        min_price=modal - 100,
        max_price=modal + 100,
        modal_price=modal,
        price_date=price_date or day(),
        unit='per quintal',
        source=source,
    )


def add_scheme(store, title, category='Financial Support', target_states=None, status='Active', **extra):
    data = dict(
        title=title,
        description=f'{title} description',
        eligibility='Farmers',
        benefits=f'{title} benefits',
        application_process='Apply online',
        status=status,
        category=category,
        target_states=target_states,
    )
    data.update(extra)
    return store.create(GovernmentScheme, **data)


def make_user(store, email='farmer@test.com', role='farmer', farm_size=None, password='secret123'):
    return store.create(
        User,
        email=email,
        password_hash=User.hash_password(password, rounds=4),
        name='Test User',
        role=role,
        farm_size=farm_size,
        crops=['Wheat'],
    )


def auth_header(app, user):
    token = create_access_token(user, app.config['JWT_SECRET'], app.config['JWT_EXPIRY_DAYS'])
    return {'Authorization': f'Bearer {token}'}
