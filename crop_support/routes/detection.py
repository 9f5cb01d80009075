# Disease Detection Routes
import time
from datetime import datetime

from flask import Blueprint, request, jsonify, current_app

from crop_support.errors import ValidationError, NotFoundError
from crop_support.models import DiseaseDetection, Notification
from crop_support.services import get_services
from crop_support.utils.images import validate_image, assess_image_quality, generate_filename

detection_bp = Blueprint('detection', __name__)

ALERT_SEVERITIES = ('High', 'Critical')


def _user_id(value, required=False):
    if value in (None, ''):
        if required:
            raise ValidationError('User ID is required')
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('User ID must be an integer')


@detection_bp.route('', methods=['POST'])
def detect():
    started = time.perf_counter()
    image = request.files.get('image')
    if image is None or not image.filename:
        raise ValidationError('No image provided')

    user_id = _user_id(request.form.get('userId'))
    crop_type = request.form.get('cropType') or None
    location = request.form.get('location') or None

    data = image.read()
    validate_image(len(data), image.mimetype, current_app.config['MAX_IMAGE_SIZE'],
                   current_app.config['ALLOWED_IMAGE_TYPES'])
    quality = assess_image_quality(data)

    services = get_services()
    result = services.detector.detect(data, crop_type=crop_type, location=location)
    filename = generate_filename(image.filename, user_id or 'anonymous')

    detection = None
    if user_id is not None:
        detection = services.store.create(
            DiseaseDetection,
            user_id=user_id,
            image_url=f'/uploads/{filename}',
            image_filename=filename,
            disease=result['disease'],
            confidence=result['confidence'],
            treatment=result['treatment'],
            severity=result['severity'],
            crop_type=crop_type,
            location=location,
        )

        # Alert the farmer on serious findings
        if result['severity'] in ALERT_SEVERITIES:
            services.store.create(
                Notification,
                user_id=user_id,
                title=f'{result["severity"]} Disease Detected',
                message=(f'{result["disease"]} detected in your {crop_type or "crop"} with '
                         f'{round(result["confidence"] * 100)}% confidence. Immediate treatment recommended.'),
                type='disease_alert',
                priority='high' if result['severity'] == 'Critical' else 'medium',
                is_read=False,
            )

    services.store.log_event(
        'disease_detection',
        {
            'disease': result['disease'],
            'confidence': result['confidence'],
            'severity': result['severity'],
            'cropType': crop_type,
            'location': location,
            'imageSize': len(data),
            'imageType': image.mimetype,
        },
        user_id=user_id,
        ip_address=request.remote_addr,
        user_agent=request.user_agent.string,
    )
    current_app.logger.info('Detected %s (%.2f) for user %s', result['disease'], result['confidence'], user_id)

    return jsonify({
        'success': True,
        'result': dict(
            result,
            detectionId=detection.id if detection else None,
            imageQuality=quality,
            timestamp=datetime.utcnow().isoformat(),
            processingTime=f'{time.perf_counter() - started:.1f}s',
        ),
    })


@detection_bp.route('', methods=['GET'])
def history():
    user_id = _user_id(request.args.get('userId'), required=True)
    limit = max(request.args.get('limit', 10, type=int), 0)
    offset = max(request.args.get('offset', 0, type=int), 0)

    detections, total = get_services().store.detections_by_user(user_id, limit=limit, offset=offset)
    return jsonify({
        'success': True,
        'detections': [d.to_dict() for d in detections],
        'total': total,
        'hasMore': offset + len(detections) < total,
    })


@detection_bp.route('/diseases', methods=['GET'])
def diseases():
    detector = get_services().detector
    crop = request.args.get('crop')
    names = detector.diseases_by_crop(crop) if crop else detector.supported_diseases()
    return jsonify({'success': True, 'diseases': names})


@detection_bp.route('/diseases/<path:name>', methods=['GET'])
def disease_info(name):
    info = get_services().detector.get_disease_info(name)
    if info is None:
        raise NotFoundError(f'Unknown disease: {name}')
    return jsonify({'success': True, 'disease': info})
