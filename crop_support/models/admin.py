# Admin Module Models
from crop_support.models.user import db, isoformat
from datetime import datetime


class AnalyticsEvent(db.Model):
    __tablename__ = 'analytics_events'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, index=True)
    event_type = db.Column(db.String(50), nullable=False, index=True)
    event_data = db.Column(db.JSON)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'eventType': self.event_type,
            'eventData': self.event_data,
            'ipAddress': self.ip_address,
            'userAgent': self.user_agent,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<AnalyticsEvent {self.id} - {self.event_type}>'
