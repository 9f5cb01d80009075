# Database Models
from crop_support.models.user import db, User
from crop_support.models.farmer import DiseaseDetection, Notification
from crop_support.models.market import MandiPrice
from crop_support.models.scheme import GovernmentScheme, SchemeApplication
from crop_support.models.admin import AnalyticsEvent

__all__ = [
    'db', 'User', 'DiseaseDetection', 'Notification',
    'MandiPrice', 'GovernmentScheme', 'SchemeApplication',
    'AnalyticsEvent'
]
