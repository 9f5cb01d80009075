# Government Schemes Service
import logging
import time
from datetime import datetime

from crop_support.errors import ValidationError, NotFoundError
from crop_support.models import GovernmentScheme, SchemeApplication, Notification

logger = logging.getLogger(__name__)

SCHEME_CATEGORIES = {
    'Financial Support': 'Direct financial assistance and subsidies for farmers',
    'Insurance': 'Crop insurance and risk management schemes',
    'Technical Support': 'Technical guidance and agricultural extension services',
    'Credit Support': 'Credit facilities and loan schemes for farmers',
    'Input Subsidy': 'Subsidies on seeds, fertilizers, and farm equipment',
}

CATEGORY_ICONS = {
    'Financial Support': 'IndianRupee',
    'Insurance': 'Shield',
    'Technical Support': 'BookOpen',
    'Credit Support': 'CreditCard',
    'Input Subsidy': 'Sprout',
}

PM_KISAN_FARM_LIMIT = 2

# Rule sets keyed by exact scheme title
ELIGIBILITY_RULES = {
    'PM-KISAN Samman Nidhi': {
        'requirements': [
            'Must be a small or marginal farmer',
            'Cultivable land should not exceed 2 hectares',
            'Must have valid land records',
        ],
        'documents': [
            'Aadhaar Card',
            'Bank Account Details',
            'Land Records (Khata/Khatauni)',
            'Passport Size Photo',
        ],
        'applicationSteps': [
            'Visit pmkisan.gov.in or nearest CSC',
            'Fill the registration form with Aadhaar details',
            'Upload required documents',
            'Submit application and note registration number',
            'Track application status online',
        ],
    },
    'Pradhan Mantri Fasal Bima Yojana': {
        'reasons': ['All farmers growing notified crops are eligible'],
        'requirements': [
            'Must be growing notified crops in notified areas',
            'Should have valid land records or crop loan documents',
            'Premium payment within due date',
        ],
        'documents': [
            'Aadhaar Card',
            'Bank Account Details',
            'Land Records',
            'Crop Loan Documents (if applicable)',
            'Sowing Certificate',
        ],
        'applicationSteps': [
            'Visit nearest bank, insurance company, or CSC',
            'Fill crop insurance application form',
            'Submit required documents',
            'Pay premium amount',
            'Receive policy document',
        ],
    },
    'Soil Health Card Scheme': {
        'reasons': ['All farmers across the country are eligible'],
        'requirements': ['Must be a farmer with cultivable land', 'Should provide soil samples'],
        'documents': ['Aadhaar Card', 'Land Records', 'Contact Details'],
        'applicationSteps': [
            'Contact local agriculture department',
            'Visit Krishi Vigyan Kendra',
            'Provide soil samples from different parts of field',
            'Receive soil health card with recommendations',
        ],
    },
    'Kisan Credit Card': {
        'requirements': [
            'Must be a farmer (including tenant farmers and sharecroppers)',
            'Should have valid land records or crop cultivation proof',
            'Good credit history preferred',
        ],
        'documents': [
            'Aadhaar Card',
            'PAN Card',
            'Land Records',
            'Bank Account Details',
            'Passport Size Photos',
            'Income Certificate',
        ],
        'applicationSteps': [
            'Visit nearest bank branch',
            'Fill KCC application form',
            'Submit required documents',
            'Bank verification and assessment',
            'Receive KCC upon approval',
        ],
    },
}

GENERIC_RULES = {
    'reasons': ['General eligibility criteria apply'],
    'requirements': ['Must be a farmer', 'Should meet scheme-specific criteria'],
    'documents': ['Aadhaar Card', 'Land Records', 'Bank Account Details'],
    'applicationSteps': [
        'Check detailed eligibility criteria',
        'Gather required documents',
        'Apply through designated channels',
        'Track application status',
    ],
}

# Schemes published by the official portals on the last refresh
REFRESHED_SCHEMES = [
    {
        'title': 'Pradhan Mantri Kisan Maan Dhan Yojana',
        'description': 'Pension scheme for small and marginal farmers',
        'eligibility': 'Small and marginal farmers aged 18-40 years',
        'benefits': 'Monthly pension of Rs. 3000 after 60 years of age',
        'application_process': 'Apply online at maandhan.in or visit nearest CSC',
        'deadline': '2025-12-31',
        'status': 'Active',
        'category': 'Financial Support',
        'target_states': ['All States'],
        'official_url': 'https://maandhan.in',
    },
]


class SchemesService:
    """Scheme lookup, eligibility verdicts, recommendations and applications."""

    def __init__(self, store, update_delay=2.0, refreshed_schemes=None):
        self.store = store
        self.update_delay = update_delay
        self.refreshed_schemes = refreshed_schemes if refreshed_schemes is not None else REFRESHED_SCHEMES

    # ==================== ELIGIBILITY ====================

    def check_eligibility(self, scheme_id, profile):
        scheme = self.store.find_by_id(GovernmentScheme, scheme_id)
        if scheme is None:
            raise NotFoundError('Scheme not found')
        return self.evaluate(scheme, profile or {})

    def evaluate(self, scheme, profile):
        rules = ELIGIBILITY_RULES.get(scheme.title, GENERIC_RULES)
        eligibility = {
            'isEligible': True,
            'reasons': list(rules.get('reasons', [])),
            'requirements': list(rules['requirements']),
            'documents': list(rules['documents']),
            'applicationSteps': list(rules['applicationSteps']),
        }

        if scheme.title == 'PM-KISAN Samman Nidhi':
            farm_size = profile.get('farmSize')
            if farm_size and farm_size > PM_KISAN_FARM_LIMIT:
                eligibility['isEligible'] = False
                eligibility['reasons'].append('Farm size exceeds 2 hectares limit for small and marginal farmers')
            else:
                eligibility['reasons'].append('Eligible as small/marginal farmer with land up to 2 hectares')
        elif scheme.title == 'Kisan Credit Card':
            if profile.get('landOwnership') == 'sharecropper':
                eligibility['reasons'].append('Eligible as sharecropper under expanded coverage')
            else:
                eligibility['reasons'].append('Eligible as farmer with land ownership/lease')

        return eligibility

    # ==================== CATALOGUE ====================

    def get_schemes_by_category(self):
        categories = {
            name: {'name': name, 'description': description, 'icon': CATEGORY_ICONS[name], 'schemes': []}
            for name, description in SCHEME_CATEGORIES.items()
        }
        for scheme in self.store.active_schemes():
            category = categories.setdefault(scheme.category, {
                'name': scheme.category,
                'description': f'Schemes related to {scheme.category.lower()}',
                'icon': 'FileText',
                'schemes': [],
            })
            category['schemes'].append(scheme.to_dict())
        return [category for category in categories.values() if category['schemes']]

    def search_schemes(self, query='', category=None, state=None, status=None):
        schemes = self.store.active_schemes()

        if query:
            term = query.lower()
            schemes = [
                s for s in schemes
                if term in s.title.lower() or term in s.description.lower()
                or term in s.category.lower() or term in s.benefits.lower()
            ]
        if category:
            schemes = [s for s in schemes if s.category == category]
        if status:
            schemes = [s for s in schemes if s.status == status]
        if state:
            wanted = state.lower()
            schemes = [
                s for s in schemes
                if not s.target_states or 'All States' in s.target_states
                or any(wanted in target.lower() for target in s.target_states)
            ]
        return schemes

    def get_recommendations(self, profile):
        high_priority, recommended, other = [], [], []
        farm_size = profile.get('farmSize')

        for scheme in self.store.active_schemes():
            eligibility = self.evaluate(scheme, profile)
            if not eligibility['isEligible']:
                other.append(scheme.to_dict())
            elif ((farm_size and farm_size <= PM_KISAN_FARM_LIMIT and 'PM-KISAN' in scheme.title)
                  or 'Fasal Bima' in scheme.title or 'Soil Health' in scheme.title):
                high_priority.append(scheme.to_dict())
            else:
                recommended.append(scheme.to_dict())

        return {'highPriority': high_priority, 'recommended': recommended, 'other': other}

    # ==================== REFRESH ====================

    def update_scheme_data(self):
        errors = []
        updated = 0

        if self.update_delay:
            time.sleep(self.update_delay)

        for data in self.refreshed_schemes:
            try:
                existing = self.store.scheme_by_title(data['title'])
                if existing is None:
                    self.store.create(GovernmentScheme, **data)
                else:
                    fields = {key: value for key, value in data.items() if key != 'title'}
                    self.store.update(GovernmentScheme, existing.id, **fields)
                updated += 1
            except ValidationError as e:
                logger.warning('Could not refresh scheme %s: %s', data.get('title'), e.message)
                errors.append(f'Update failed for {data.get("title", "unknown")}: {e.message}')

        self.store.log_event('schemes_update', {
            'updated': updated,
            'errors': len(errors),
            'timestamp': datetime.utcnow().isoformat(),
        })
        logger.info('Government schemes update completed: updated=%d errors=%d', updated, len(errors))
        return {'success': not errors, 'updated': updated, 'errors': errors}

    # ==================== APPLICATIONS ====================

    def create_application(self, user_id, scheme_id, documents=None):
        if self.store.find_by_id(GovernmentScheme, scheme_id) is None:
            raise NotFoundError('Scheme not found')
        documents = documents or []
        if not isinstance(documents, list) or not all(isinstance(doc, dict) for doc in documents):
            raise ValidationError('Documents must be a list of objects')
        uploaded_at = datetime.utcnow().isoformat()
        docs = [dict(doc, uploadedAt=uploaded_at) for doc in documents]
        return self.store.create(
            SchemeApplication,
            user_id=int(user_id),
            scheme_id=int(scheme_id),
            status='draft',
            documents=docs,
        )

    def submit_application(self, application_id):
        application = self.get_application(application_id)
        if application.status != 'draft':
            raise ValidationError(f'Application {application.id} is already {application.status}')

        application = self.store.update(
            SchemeApplication, application.id,
            status='submitted', submitted_at=datetime.utcnow(),
        )
        self.store.create(
            Notification,
            user_id=application.user_id,
            title='Application Submitted',
            message=f'Your scheme application has been submitted successfully. Application ID: {application.id}',
            type='scheme_update',
            priority='medium',
            is_read=False,
        )
        return application

    def get_application(self, application_id):
        application = self.store.find_by_id(SchemeApplication, application_id)
        if application is None:
            raise NotFoundError('Application not found')
        return application
