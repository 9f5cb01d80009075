# Image Utility Functions
import secrets
import time
from io import BytesIO

from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from crop_support.errors import ValidationError

LOW_QUALITY_BYTES = 100000
HIGH_QUALITY_BYTES = 1000000
MIN_DETECTION_BYTES = 50000
LARGE_IMAGE_BYTES = 5000000


def _megabytes(size):
    return round(size / 1024 / 1024)


def validate_image(size, content_type, max_size, allowed_types):
    """
    Check an upload before it is read for detection.

    Raises:
        ValidationError: when the file is too large or of an unsupported type
    """
    if size > max_size:
        raise ValidationError(
            f'Image size ({_megabytes(size)}MB) exceeds maximum allowed size ({_megabytes(max_size)}MB)'
        )
    if content_type not in allowed_types:
        raise ValidationError(
            f'Image type {content_type} is not supported. Allowed types: {", ".join(allowed_types)}'
        )
    return {'size': size, 'type': content_type}


def sniff_format(data):
    if data[:2] == b'\xff\xd8':
        return 'jpeg'
    if data[:2] == b'\x89P':
        return 'png'
    if data[:2] == b'RI':
        return 'webp'
    return 'unknown'


def get_image_metadata(data):
    size = len(data)
    quality = 'medium'
    if size < LOW_QUALITY_BYTES:
        quality = 'low'
    elif size > HIGH_QUALITY_BYTES:
        quality = 'high'

    metadata = {'size': size, 'format': sniff_format(data), 'quality': quality, 'dimensions': None}
    try:
        with Image.open(BytesIO(data)) as image:
            metadata['dimensions'] = {'width': image.width, 'height': image.height}
    except (UnidentifiedImageError, OSError):
        pass
    return metadata


def assess_image_quality(data):
    metadata = get_image_metadata(data)
    issues = []
    recommendations = []

    if metadata['size'] < MIN_DETECTION_BYTES:
        issues.append('Image resolution may be too low for accurate detection')
        recommendations.append('Use a higher resolution image (at least 500x500 pixels)')

    if metadata['size'] > LARGE_IMAGE_BYTES:
        issues.append('Image file size is very large')
        recommendations.append('Consider compressing the image to reduce file size')

    if metadata['quality'] == 'low':
        issues.append('Image quality appears to be low')
        recommendations.append('Ensure good lighting and focus when taking the photo')

    if not issues:
        recommendations.append('Image appears suitable for disease detection')
    else:
        recommendations.extend([
            'Take a clear, well-lit photo of the affected plant part',
            'Ensure the diseased area is clearly visible',
            'Avoid blurry or dark images',
        ])

    return {'suitable': not issues, 'issues': issues, 'recommendations': recommendations}


def generate_filename(original_name, user_id):
    extension = 'jpg'
    if original_name and '.' in original_name:
        extension = original_name.rsplit('.', 1)[1].lower() or 'jpg'
    timestamp = int(time.time() * 1000)
    return secure_filename(f'{user_id}_{timestamp}_{secrets.token_hex(3)}.{extension}')
