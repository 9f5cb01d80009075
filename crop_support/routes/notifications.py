# Notification Routes
from flask import Blueprint, request, jsonify

from crop_support.errors import ValidationError, NotFoundError
from crop_support.services import get_services

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
def list_notifications():
    user_id = request.args.get('userId', type=int)
    if user_id is None:
        raise ValidationError('User ID is required')
    unread_only = request.args.get('unreadOnly', '').lower() in ('1', 'true', 'yes')

    notifications = get_services().store.notifications_for_user(user_id, unread_only=unread_only)
    return jsonify({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'unread': sum(1 for n in notifications if not n.is_read),
    })


@notifications_bp.route('/<int:notification_id>/read', methods=['POST'])
def mark_read(notification_id):
    if not get_services().store.mark_notification_read(notification_id):
        raise NotFoundError('Notification not found')
    return jsonify({'success': True})
