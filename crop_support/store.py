# Record Store
import logging
import threading
from datetime import datetime, timedelta

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from crop_support.errors import ValidationError
from crop_support.models import (
    db, User, DiseaseDetection, MandiPrice, GovernmentScheme,
    Notification, AnalyticsEvent,
)

logger = logging.getLogger(__name__)


def _check_fields(model, fields):
    columns = {column.key for column in inspect(model).columns}
    unknown = set(fields) - columns
    if unknown:
        raise ValidationError(f'Unknown fields for {model.__name__}: {", ".join(sorted(unknown))}')
    return columns


def _apply_scalar_defaults(record):
    """Fill unset columns that have a literal default before validation."""
    for column in inspect(type(record)).columns:
        default = column.default
        if default is None or not default.is_scalar:
            continue
        if getattr(record, column.key, None) is None:
            setattr(record, column.key, default.arg)


class RecordStore:
    """Typed record collections backed by the application's SQLAlchemy session.

    One store is built per application. Every public call holds the store
    lock, so a call is atomic with respect to other callers, but nothing spans
    more than one call: a detection and its notification are two writes.
    """

    def __init__(self, session=None):
        self._session = session
        self._lock = threading.RLock()

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    # ==================== GENERIC OPERATIONS ====================

    def create(self, model, **data):
        with self._lock:
            _check_fields(model, data)
            record = model(**data)
            _apply_scalar_defaults(record)
            validate = getattr(record, 'validate', None)
            if validate is not None:
                validate()
            try:
                self.session.add(record)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                raise ValidationError(f'Could not store {model.__name__}: {e.__class__.__name__}')
            return record

    def find_by_id(self, model, record_id):
        with self._lock:
            if record_id is None:
                return None
            try:
                record_id = int(record_id)
            except (TypeError, ValueError):
                return None
            return self.session.get(model, record_id)

    def filter_by(self, model, *criteria, predicate=None, **equals):
        with self._lock:
            query = self.session.query(model)
            if criteria:
                query = query.filter(*criteria)
            if equals:
                query = query.filter_by(**equals)
            records = query.order_by(model.id).all()
        if predicate is not None:
            records = [record for record in records if predicate(record)]
        return records

    def update(self, model, record_id, **patch):
        with self._lock:
            record = self.find_by_id(model, record_id)
            if record is None:
                return None
            columns = _check_fields(model, patch)
            try:
                for key, value in patch.items():
                    setattr(record, key, value)
                if 'updated_at' in columns:
                    record.updated_at = datetime.utcnow()
                validate = getattr(record, 'validate', None)
                if validate is not None:
                    validate()
                self.session.commit()
            except ValidationError:
                self.session.rollback()
                raise
            except SQLAlchemyError as e:
                self.session.rollback()
                raise ValidationError(f'Could not update {model.__name__}: {e.__class__.__name__}')
            return record

    def count(self, model, *criteria):
        with self._lock:
            query = self.session.query(model)
            if criteria:
                query = query.filter(*criteria)
            return query.count()

    # ==================== USERS ====================

    def get_user_by_email(self, email):
        with self._lock:
            if not email:
                return None
            return self.session.query(User).filter(User.email == email.strip().lower()).first()

    # ==================== DISEASE DETECTIONS ====================

    def detections_by_user(self, user_id, limit=None, offset=0):
        with self._lock:
            query = (self.session.query(DiseaseDetection)
                     .filter(DiseaseDetection.user_id == user_id)
                     .order_by(DiseaseDetection.created_at.desc(), DiseaseDetection.id.desc()))
            total = query.count()
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return query.all(), total

    def recent_detections(self, limit=10):
        with self._lock:
            return (self.session.query(DiseaseDetection)
                    .order_by(DiseaseDetection.created_at.desc(), DiseaseDetection.id.desc())
                    .limit(limit).all())

    # ==================== MANDI PRICES ====================

    def prices_by_crop(self, crop):
        return self.filter_by(MandiPrice, MandiPrice.crop.icontains(crop, autoescape=True))

    def prices_by_state(self, state):
        return self.filter_by(MandiPrice, MandiPrice.state.icontains(state, autoescape=True))

    # ==================== GOVERNMENT SCHEMES ====================

    def active_schemes(self):
        return self.filter_by(GovernmentScheme, status='Active')

    def schemes_by_category(self, category):
        return self.filter_by(GovernmentScheme, category=category)

    def scheme_by_title(self, title):
        with self._lock:
            return self.session.query(GovernmentScheme).filter(GovernmentScheme.title == title).first()

    # ==================== NOTIFICATIONS ====================

    def notifications_for_user(self, user_id, unread_only=False):
        with self._lock:
            query = self.session.query(Notification).filter(Notification.user_id == user_id)
            if unread_only:
                query = query.filter(Notification.is_read.is_(False))
            return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def mark_notification_read(self, notification_id):
        with self._lock:
            notification = self.find_by_id(Notification, notification_id)
            if notification is None:
                return False
            if not notification.is_read:
                notification.is_read = True
                self.session.commit()
            return True

    # ==================== ANALYTICS ====================

    def log_event(self, event_type, event_data=None, user_id=None, ip_address=None, user_agent=None):
        return self.create(
            AnalyticsEvent,
            event_type=event_type,
            event_data=event_data or {},
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent[:255] if user_agent else None,
        )

    def events_by_type(self, event_type, days=30):
        cutoff = datetime.utcnow() - timedelta(days=days)
        return self.filter_by(AnalyticsEvent, AnalyticsEvent.created_at >= cutoff, event_type=event_type)

    def dashboard_stats(self):
        with self._lock:
            recent = datetime.utcnow() - timedelta(days=7)
            return {
                'totalUsers': self.count(User),
                'totalDetections': self.count(DiseaseDetection),
                'totalPrices': self.count(MandiPrice),
                'activeSchemes': self.count(GovernmentScheme, GovernmentScheme.status == 'Active'),
                'recentDetections': self.count(DiseaseDetection, DiseaseDetection.created_at >= recent),
                'unreadNotifications': self.count(Notification, Notification.is_read.is_(False)),
            }

    def ping(self):
        """Round-trip to the database; used by the health check."""
        with self._lock:
            try:
                self.session.execute(text('SELECT 1'))
                return True
            except SQLAlchemyError:
                logger.exception('Store health check failed')
                self.session.rollback()
                return False
