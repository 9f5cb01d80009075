# Government Schemes Routes
from flask import Blueprint, request, jsonify, current_app

from crop_support.errors import ValidationError, NotFoundError
from crop_support.models import User
from crop_support.services import get_services

schemes_bp = Blueprint('schemes', __name__)


def _profile_for(user_id):
    if not user_id:
        raise ValidationError('User ID is required')
    user = get_services().store.find_by_id(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user.profile()


@schemes_bp.route('', methods=['GET'])
def list_schemes():
    action = request.args.get('action')
    user_id = request.args.get('userId')
    schemes = get_services().schemes

    if action == 'categories':
        return jsonify({'success': True, 'categories': schemes.get_schemes_by_category()})

    if action == 'recommendations':
        profile = _profile_for(user_id)
        return jsonify({'success': True, 'recommendations': schemes.get_recommendations(profile)})

    if action == 'eligibility':
        scheme_id = request.args.get('schemeId')
        if not scheme_id or not user_id:
            raise ValidationError('Scheme ID and User ID are required')
        profile = _profile_for(user_id)
        if request.args.get('landOwnership'):
            profile['landOwnership'] = request.args['landOwnership']
        return jsonify({'success': True, 'eligibility': schemes.check_eligibility(scheme_id, profile)})

    if action == 'application':
        application = schemes.get_application(request.args.get('applicationId'))
        return jsonify({'success': True, 'application': application.to_dict()})

    # Search schemes
    results = schemes.search_schemes(
        request.args.get('query', ''),
        category=request.args.get('category') or None,
        state=request.args.get('state') or None,
        status='Active',
    )
    return jsonify({'success': True, 'schemes': [s.to_dict() for s in results], 'total': len(results)})


@schemes_bp.route('', methods=['POST'])
def scheme_action():
    data = request.get_json(silent=True) or {}
    action = data.get('action')
    schemes = get_services().schemes

    if action == 'update':
        result = schemes.update_scheme_data()
        return jsonify({'success': result['success'], 'message': f'Updated {result["updated"]} schemes',
                        'result': result})

    if action == 'apply':
        if not data.get('userId') or not data.get('schemeId'):
            raise ValidationError('Scheme ID and User ID are required')
        _profile_for(data['userId'])
        try:
            application = schemes.create_application(data['userId'], data['schemeId'], data.get('documents'))
        except (TypeError, ValueError):
            raise ValidationError('Scheme ID and User ID must be integers')
        current_app.logger.info('Application %s created for scheme %s', application.id, application.scheme_id)
        return jsonify({'success': True, 'application': application.to_dict()}), 201

    if action == 'submit':
        application = schemes.submit_application(data.get('applicationId'))
        return jsonify({'success': True, 'message': 'Application submitted', 'application': application.to_dict()})

    raise ValidationError('Invalid action')
