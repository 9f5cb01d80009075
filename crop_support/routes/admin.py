# Admin Module Routes
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from crop_support.errors import ValidationError, PermissionDenied, NotFoundError
from crop_support.services import get_services, task_definitions
from crop_support.services.analytics import build_snapshot, DEFAULT_TIMEFRAME

admin_bp = Blueprint('admin', __name__)

# ==================== ANALYTICS ====================


@admin_bp.route('/analytics', methods=['GET'])
def analytics():
    timeframe = request.args.get('timeframe', DEFAULT_TIMEFRAME)
    metric = request.args.get('metric')

    snapshot = build_snapshot(get_services().store, timeframe)
    if metric:
        if metric not in snapshot:
            raise NotFoundError(f'Unknown metric: {metric}')
        return jsonify({'success': True, 'metric': metric, 'data': snapshot[metric]})
    return jsonify({'success': True, 'analytics': snapshot})

# ==================== SCHEDULED TASKS ====================


@admin_bp.route('/tasks', methods=['GET'])
def task_status():
    return jsonify({'success': True, 'tasks': get_services().tasks.status()})


@admin_bp.route('/tasks', methods=['POST'])
@login_required
def control_task():
    if not current_user.is_admin():
        raise PermissionDenied('Access denied')

    data = request.get_json(silent=True) or {}
    action = data.get('action')
    name = data.get('name')
    tasks = get_services().tasks
    definitions = task_definitions(current_app)

    if action == 'stop_all':
        tasks.stop_all()
    elif name not in definitions:
        raise NotFoundError(f'Unknown task: {name}')
    elif action == 'start':
        interval, task = definitions[name]
        try:
            tasks.start(name, int(data.get('intervalSeconds') or interval), task)
        except (TypeError, ValueError):
            raise ValidationError('intervalSeconds must be a positive integer')
    elif action == 'stop':
        tasks.stop(name)
    elif action == 'run':
        tasks.run_now(name, definitions[name][1])
    else:
        raise ValidationError('Invalid action')

    current_app.logger.info('Admin %s ran task action %s on %s', current_user.id, action, name)
    return jsonify({'success': True, 'tasks': tasks.status()})
