# Farmer Module Models
from crop_support.models.user import db, isoformat
from crop_support.errors import ValidationError
from sqlalchemy.orm import validates
from datetime import datetime

SEVERITY_LEVELS = ['None', 'Low', 'Medium', 'High', 'Critical']
NOTIFICATION_TYPES = ['disease_alert', 'price_update', 'scheme_update', 'weather_alert', 'general']
NOTIFICATION_PRIORITIES = ['low', 'medium', 'high']


class DiseaseDetection(db.Model):
    __tablename__ = 'disease_detections'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    image_url = db.Column(db.String(255), nullable=False)
    image_filename = db.Column(db.String(255))
    disease = db.Column(db.String(100), nullable=False)
    confidence = db.Column(db.Float, nullable=False)
    treatment = db.Column(db.Text, nullable=False)
    severity = db.Column(db.String(10), nullable=False)  # None, Low, Medium, High, Critical
    crop_type = db.Column(db.String(100))
    location = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def validate(self):
        if self.confidence is None or not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(f'Confidence {self.confidence} is outside [0, 1]')
        if self.severity not in SEVERITY_LEVELS:
            raise ValidationError(f'Unknown severity: {self.severity}')

    @property
    def severity_rank(self):
        return SEVERITY_LEVELS.index(self.severity)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'imageUrl': self.image_url,
            'imageFilename': self.image_filename,
            'disease': self.disease,
            'confidence': self.confidence,
            'treatment': self.treatment,
            'severity': self.severity,
            'cropType': self.crop_type,
            'location': self.location,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<DiseaseDetection {self.id} - {self.disease}>'


class Notification(db.Model):
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default='general')
    priority = db.Column(db.String(10), nullable=False, default='medium')  # low, medium, high
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @validates('is_read')
    def validate_is_read(self, key, value):
        # read flag only moves from unread to read
        if self.is_read and not value:
            raise ValidationError('A read notification cannot be marked unread')
        return bool(value)

    def validate(self):
        if self.type not in NOTIFICATION_TYPES:
            raise ValidationError(f'Unknown notification type: {self.type}')
        if self.priority not in NOTIFICATION_PRIORITIES:
            raise ValidationError(f'Unknown notification priority: {self.priority}')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'priority': self.priority,
            'isRead': self.is_read,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Notification {self.id} -> {self.user_id}>'
