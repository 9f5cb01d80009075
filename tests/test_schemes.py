import pytest

from crop_support.errors import NotFoundError, ValidationError
from crop_support.models import GovernmentScheme, Notification, AnalyticsEvent

from conftest import add_scheme


@pytest.fixture
def schemes(services):
    return services.schemes


def test_pm_kisan_farm_size_limit(store, schemes):
    scheme = add_scheme(store, 'PM-KISAN Samman Nidhi')

    large = schemes.check_eligibility(scheme.id, {'farmSize': 3})
    assert large['isEligible'] is False
    assert 'exceeds 2 hectares' in large['reasons'][0]

    small = schemes.check_eligibility(scheme.id, {'farmSize': 1.5})
    assert small['isEligible'] is True
    assert 'Aadhaar Card' in small['documents']
    assert len(small['applicationSteps']) == 5


def test_pm_kisan_without_farm_size_is_eligible(store, schemes):
    scheme = add_scheme(store, 'PM-KISAN Samman Nidhi')
    assert schemes.check_eligibility(scheme.id, {})['isEligible'] is True


def test_kisan_credit_card_sharecropper_wording(store, schemes):
    scheme = add_scheme(store, 'Kisan Credit Card', category='Credit Support')
    verdict = schemes.check_eligibility(scheme.id, {'landOwnership': 'sharecropper', 'farmSize': 10})
    assert verdict['isEligible'] is True
    assert verdict['reasons'] == ['Eligible as sharecropper under expanded coverage']


def test_unknown_title_uses_generic_rules(store, schemes):
    scheme = add_scheme(store, 'State Horticulture Mission')
    verdict = schemes.check_eligibility(scheme.id, {'farmSize': 50})
    assert verdict['isEligible'] is True
    assert verdict['reasons'] == ['General eligibility criteria apply']


def test_unknown_scheme_id(schemes):
    with pytest.raises(NotFoundError, match='Scheme not found'):
        schemes.check_eligibility(999, {'farmSize': 1})


def test_categories_group_active_schemes(store, schemes):
    add_scheme(store, 'PM-KISAN Samman Nidhi', category='Financial Support')
    add_scheme(store, 'Pradhan Mantri Fasal Bima Yojana', category='Insurance')
    add_scheme(store, 'Organic Farming Mission', category='Organic Farming')
    add_scheme(store, 'Old Scheme', category='Credit Support', status='Expired')

    categories = {c['name']: c for c in schemes.get_schemes_by_category()}
    assert set(categories) == {'Financial Support', 'Insurance', 'Organic Farming'}
    assert categories['Organic Farming']['icon'] == 'FileText'
    assert categories['Organic Farming']['description'] == 'Schemes related to organic farming'
    assert categories['Insurance']['schemes'][0]['title'] == 'Pradhan Mantri Fasal Bima Yojana'


def test_search_by_text_and_state(store, schemes):
    add_scheme(store, 'PM-KISAN Samman Nidhi', target_states=['All States'])
    add_scheme(store, 'Punjab Tubewell Subsidy', category='Input Subsidy', target_states=['Punjab'])
    add_scheme(store, 'Kerala Coconut Mission', category='Input Subsidy', target_states=['Kerala'])
    add_scheme(store, 'National Bee Mission')

    in_punjab = [s.title for s in schemes.search_schemes(state='punjab')]
    assert in_punjab == ['PM-KISAN Samman Nidhi', 'Punjab Tubewell Subsidy', 'National Bee Mission']

    subsidy = [s.title for s in schemes.search_schemes('coconut')]
    assert subsidy == ['Kerala Coconut Mission']

    by_category = schemes.search_schemes(category='Input Subsidy')
    assert len(by_category) == 2


def test_recommendations_buckets(store, schemes):
    add_scheme(store, 'PM-KISAN Samman Nidhi')
    add_scheme(store, 'Soil Health Card Scheme', category='Technical Support')
    add_scheme(store, 'Kisan Credit Card', category='Credit Support')

    small = schemes.get_recommendations({'farmSize': 1.5})
    assert [s['title'] for s in small['highPriority']] == ['PM-KISAN Samman Nidhi', 'Soil Health Card Scheme']
    assert [s['title'] for s in small['recommended']] == ['Kisan Credit Card']
    assert small['other'] == []

    large = schemes.get_recommendations({'farmSize': 4})
    assert [s['title'] for s in large['other']] == ['PM-KISAN Samman Nidhi']


def test_update_scheme_data_upserts_by_title(store, schemes):
    first = schemes.update_scheme_data()
    second = schemes.update_scheme_data()

    assert first == {'success': True, 'updated': 1, 'errors': []}
    assert second['updated'] == 1
    refreshed = store.filter_by(GovernmentScheme, title='Pradhan Mantri Kisan Maan Dhan Yojana')
    assert len(refreshed) == 1
    assert len(store.events_by_type('schemes_update')) == 2
    assert store.count(AnalyticsEvent) == 2


def test_application_lifecycle(store, schemes):
    scheme = add_scheme(store, 'PM-KISAN Samman Nidhi')
    application = schemes.create_application(7, scheme.id, [{'type': 'Aadhaar Card', 'filename': 'aadhaar.pdf'}])

    assert application.status == 'draft'
    assert application.documents[0]['filename'] == 'aadhaar.pdf'
    assert 'uploadedAt' in application.documents[0]

    submitted = schemes.submit_application(application.id)
    assert submitted.status == 'submitted'
    assert submitted.submitted_at is not None

    notes = store.filter_by(Notification, user_id=7)
    assert len(notes) == 1
    assert notes[0].type == 'scheme_update'
    assert str(application.id) in notes[0].message

    with pytest.raises(ValidationError):
        schemes.submit_application(application.id)


def test_application_for_missing_scheme(schemes):
    with pytest.raises(NotFoundError):
        schemes.create_application(1, 404)
    with pytest.raises(NotFoundError):
        schemes.get_application(404)


def test_application_documents_must_be_objects(store, schemes):
    scheme = add_scheme(store, 'Kisan Credit Card', category='Credit Support')
    with pytest.raises(ValidationError, match='Documents must be a list of objects'):
        schemes.create_application(1, scheme.id, ['aadhaar.pdf'])
    with pytest.raises(ValidationError):
        schemes.create_application(1, scheme.id, {'type': 'Aadhaar Card'})
