# Demo data seeding
import logging
from datetime import date, timedelta

from crop_support.errors import ValidationError
from crop_support.models import User, GovernmentScheme, MandiPrice

logger = logging.getLogger(__name__)

DEMO_PASSWORD = 'demo123'

DEMO_USERS = [
    {
        'email': 'farmer@demo.com',
        'name': 'Gurpreet Singh',
        'phone': '9876543210',
        'location': 'Ludhiana, Punjab',
        'farm_size': 1.5,
        'crops': ['Wheat', 'Rice'],
        'role': 'farmer',
        'language_preference': 'pa',
    },
    {
        'email': 'farmer2@demo.com',
        'name': 'Sunita Patil',
        'phone': '9876543211',
        'location': 'Nashik, Maharashtra',
        'farm_size': 3.5,
        'crops': ['Tomato', 'Onion'],
        'role': 'farmer',
        'language_preference': 'mr',
    },
    {
        'email': 'admin@demo.com',
        'name': 'Admin User',
        'phone': '9876543212',
        'location': 'New Delhi, Delhi',
        'role': 'admin',
        'language_preference': 'en',
    },
]

DEMO_SCHEMES = [
    {
        'title': 'PM-KISAN Samman Nidhi',
        'description': 'Income support of Rs. 6000 per year to small and marginal farmer families',
        'eligibility': 'Small and marginal farmers with cultivable land up to 2 hectares',
        'benefits': 'Rs. 6000 per year in three equal installments, paid directly to bank accounts',
        'application_process': 'Register at pmkisan.gov.in or through the nearest Common Service Centre',
        'status': 'Active',
        'category': 'Financial Support',
        'target_states': ['All States'],
        'official_url': 'https://pmkisan.gov.in',
    },
    {
        'title': 'Pradhan Mantri Fasal Bima Yojana',
        'description': 'Crop insurance against yield loss from natural calamities, pests and diseases',
        'eligibility': 'All farmers growing notified crops in notified areas',
        'benefits': 'Comprehensive risk cover at a premium of 2% for kharif and 1.5% for rabi crops',
        'application_process': 'Apply through banks, insurance companies, CSCs or the PMFBY portal',
        'deadline': '2025-07-31',
        'status': 'Active',
        'category': 'Insurance',
        'target_states': ['All States'],
        'official_url': 'https://pmfby.gov.in',
    },
    {
        'title': 'Soil Health Card Scheme',
        'description': 'Soil testing with crop-wise nutrient and fertilizer recommendations',
        'eligibility': 'All farmers with cultivable land',
        'benefits': 'Free soil health card every two years with fertilizer recommendations',
        'application_process': 'Contact the local agriculture department or Krishi Vigyan Kendra',
        'status': 'Active',
        'category': 'Technical Support',
        'target_states': ['All States'],
        'official_url': 'https://soilhealth.dac.gov.in',
    },
    {
        'title': 'Kisan Credit Card',
        'description': 'Short-term credit for cultivation, post-harvest and allied activities',
        'eligibility': 'Owner cultivators, tenant farmers, oral lessees and sharecroppers',
        'benefits': 'Collateral-free loans up to Rs. 1.6 lakh with interest subvention',
        'application_process': 'Apply at any commercial, cooperative or regional rural bank branch',
        'status': 'Active',
        'category': 'Credit Support',
        'target_states': ['All States'],
        'official_url': 'https://www.myscheme.gov.in/schemes/kcc',
    },
    {
        'title': 'Sub-Mission on Agricultural Mechanization',
        'description': 'Subsidy on farm machinery and custom hiring centres',
        'eligibility': 'Individual farmers, groups and cooperatives',
        'benefits': '40-50% subsidy on purchase of farm equipment',
        'application_process': 'Apply on the state agriculture department portal',
        'deadline': '2025-03-31',
        'status': 'Active',
        'category': 'Input Subsidy',
        'target_states': ['Punjab', 'Haryana', 'Uttar Pradesh', 'Maharashtra'],
        'official_url': 'https://agrimachinery.nic.in',
    },
]

# (crop, variety, market, state, district, modal price today)
PRICE_HISTORY = [
    ('Wheat', 'HD-2967', 'Karnal Mandi', 'Haryana', 'Karnal', 2200),
    ('Wheat', 'PBW-343', 'Khanna Mandi', 'Punjab', 'Ludhiana', 2250),
    ('Rice', 'Basmati', 'Amritsar Mandi', 'Punjab', 'Amritsar', 3750),
    ('Tomato', 'Hybrid', 'Delhi Azadpur Mandi', 'Delhi', 'Delhi', 1000),
    ('Onion', 'Nasik Red', 'Nashik Mandi', 'Maharashtra', 'Nashik', 2250),
    ('Potato', 'Jyoti', 'Agra Mandi', 'Uttar Pradesh', 'Agra', 1350),
]
HISTORY_DAYS = 7


def seed_demo_data(store, bcrypt_rounds=12):
    """Seed users, schemes and a week of prices into an empty store."""
    result = {'created': [], 'skipped': [], 'errors': []}

    if store.count(User):
        logger.info('Demo data already present, skipping seeding')
        result['skipped'].append('all_exist')
        return result

    password_hash = User.hash_password(DEMO_PASSWORD, rounds=bcrypt_rounds)
    for data in DEMO_USERS:
        try:
            store.create(User, password_hash=password_hash, **data)
            result['created'].append(data['email'])
        except ValidationError as e:
            result['errors'].append(f'{data["email"]}: {e.message}')

    for data in DEMO_SCHEMES:
        try:
            store.create(GovernmentScheme, **data)
            result['created'].append(data['title'])
        except ValidationError as e:
            result['errors'].append(f'{data["title"]}: {e.message}')

    today = date.today()
    for crop, variety, market, state, district, modal in PRICE_HISTORY:
        # Older days trend slightly lower so the trend view has something to show
        for days_ago in range(HISTORY_DAYS - 1, -1, -1):
            price = round(modal * (1 - 0.01 * days_ago))
            try:
                store.create(
                    MandiPrice,
                    crop=crop, variety=variety, market=market, state=state, district=district,
                    min_price=round(price * 0.95), max_price=round(price * 1.05), modal_price=price,
                    price_date=(today - timedelta(days=days_ago)).isoformat(),
                    unit='per quintal', source='AgMarkNet',
                )
            except ValidationError as e:
                result['errors'].append(f'{crop} @ {market}: {e.message}')

    logger.info('Seeded %d demo records with %d errors', len(result['created']), len(result['errors']))
    return result
