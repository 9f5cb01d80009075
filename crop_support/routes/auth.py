# Authentication Routes
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from crop_support.errors import ValidationError, AuthenticationError, PermissionDenied, NotFoundError
from crop_support.models import User
from crop_support.services import get_services
from crop_support.utils.security import create_access_token

auth_bp = Blueprint('auth', __name__)

PROFILE_FIELDS = {
    'name': 'name',
    'phone': 'phone',
    'location': 'location',
    'farmSize': 'farm_size',
    'crops': 'crops',
    'languagePreference': 'language_preference',
}


def _farm_size(value):
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError('farmSize must be a number')


def _token_for(user):
    return create_access_token(user, current_app.config['JWT_SECRET'], current_app.config['JWT_EXPIRY_DAYS'])


@auth_bp.route('/auth', methods=['POST'])
def authenticate():
    data = request.get_json(silent=True) or {}
    action = data.get('action')
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if action not in ('login', 'register'):
        raise ValidationError('Invalid action')

    # Validation
    if not email or not password:
        raise ValidationError('Email and password are required')

    store = get_services().store

    if action == 'login':
        user = store.get_user_by_email(email)
        if user is None or not user.check_password(password):
            raise AuthenticationError('Invalid email or password')
        store.log_event('login', {'role': user.role}, user_id=user.id,
                        ip_address=request.remote_addr, user_agent=request.user_agent.string)
        current_app.logger.info('User %s logged in', user.id)
        return jsonify({'success': True, 'user': user.to_dict(), 'token': _token_for(user)})

    if store.get_user_by_email(email) is not None:
        raise ValidationError('Email already exists')

    farm_size = _farm_size(data.get('farmSize'))
    language = data.get('languagePreference') or 'en'
    if language not in current_app.config['SUPPORTED_LANGUAGES']:
        raise ValidationError(f'Unsupported language: {language}')

    try:
        user = store.create(
            User,
            email=email,
            password_hash=User.hash_password(password, rounds=current_app.config['BCRYPT_ROUNDS']),
            name=(data.get('name') or '').strip() or 'New Farmer',
            phone=data.get('phone'),
            location=data.get('location'),
            farm_size=farm_size,
            crops=data.get('crops') or [],
            role='farmer',
            language_preference=language,
        )
    except ValidationError:
        # lost a race with another registration for the same email
        if store.get_user_by_email(email) is not None:
            raise ValidationError('Email already exists')
        raise
    store.log_event('register', {'role': user.role}, user_id=user.id,
                    ip_address=request.remote_addr, user_agent=request.user_agent.string)
    current_app.logger.info('Registered user %s', user.id)

    return jsonify({
        'success': True,
        'message': 'User registered successfully',
        'user': user.to_dict(),
        'token': _token_for(user),
    }), 201


@auth_bp.route('/auth', methods=['GET'])
@login_required
def whoami():
    return jsonify({'success': True, 'user': current_user.to_dict()})


def _visible_user(user_id):
    if current_user.id != user_id and not current_user.is_admin():
        raise PermissionDenied('Access denied')
    user = get_services().store.find_by_id(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


@auth_bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
def get_user(user_id):
    return jsonify({'success': True, 'user': _visible_user(user_id).to_dict()})


@auth_bp.route('/users/<int:user_id>', methods=['PATCH'])
@login_required
def update_user(user_id):
    _visible_user(user_id)
    data = request.get_json(silent=True) or {}

    unknown = set(data) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f'Fields cannot be updated: {", ".join(sorted(unknown))}')

    patch = {PROFILE_FIELDS[key]: value for key, value in data.items()}
    if 'language_preference' in patch and patch['language_preference'] not in current_app.config['SUPPORTED_LANGUAGES']:
        raise ValidationError(f'Unsupported language: {patch["language_preference"]}')
    if 'farm_size' in patch:
        patch['farm_size'] = _farm_size(patch['farm_size'])

    user = get_services().store.update(User, user_id, **patch)
    return jsonify({'success': True, 'user': user.to_dict()})
