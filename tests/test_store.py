from datetime import datetime, timedelta

import pytest

from crop_support.errors import ValidationError
from crop_support.models import Notification, DiseaseDetection, MandiPrice, AnalyticsEvent, User

from conftest import add_price, make_user


def _notify(store, user_id=1, title='Hello', **extra):
    return store.create(Notification, user_id=user_id, title=title, message='msg', **extra)


def test_created_ids_are_unique(store):
    ids = [_notify(store, title=f'n{i}').id for i in range(5)]
    assert len(set(ids)) == 5


def test_create_applies_column_defaults(store):
    note = _notify(store)
    assert note.is_read is False
    assert note.type == 'general'
    assert note.priority == 'medium'
    assert note.created_at is not None


def test_find_by_id_is_nullable(store):
    note = _notify(store)
    assert store.find_by_id(Notification, note.id) is note
    assert store.find_by_id(Notification, 9999) is None
    assert store.find_by_id(Notification, 'abc') is None
    assert store.find_by_id(Notification, None) is None


def test_filter_by_keeps_insertion_order_and_applies_predicate(store):
    for title in ('first', 'second', 'third'):
        _notify(store, title=title)
    _notify(store, user_id=2, title='other')

    titles = [n.title for n in store.filter_by(Notification, user_id=1)]
    assert titles == ['first', 'second', 'third']

    picked = store.filter_by(Notification, user_id=1, predicate=lambda n: n.title.startswith('t'))
    assert [n.title for n in picked] == ['third']

    assert store.filter_by(Notification, user_id=42) == []


def test_update_merges_fields_and_refreshes_timestamp(store):
    user = make_user(store)
    before = user.updated_at

    updated = store.update(User, user.id, location='Karnal, Haryana', farm_size=2.5)
    assert updated.location == 'Karnal, Haryana'
    assert updated.farm_size == 2.5
    assert updated.updated_at >= before


def test_update_missing_record_returns_none(store):
    assert store.update(User, 12345, name='Nobody') is None


def test_update_rejects_unknown_fields(store):
    user = make_user(store)
    with pytest.raises(ValidationError):
        store.update(User, user.id, favourite_colour='green')


def test_detection_confidence_is_validated(store):
    with pytest.raises(ValidationError):
        store.create(DiseaseDetection, user_id=1, image_url='/uploads/x.jpg', disease='Wheat Rust',
                     confidence=1.4, treatment='Spray', severity='Medium')
    assert store.count(DiseaseDetection) == 0


def test_price_range_is_validated(store):
    with pytest.raises(ValidationError):
        store.create(MandiPrice, crop='Wheat', market='Karnal Mandi', state='Haryana',
                     min_price=2100, max_price=2300, modal_price=2500, price_date='2024-05-01')
    with pytest.raises(ValidationError):
        store.create(MandiPrice, crop='Wheat', market='Karnal Mandi', state='Haryana',
                     min_price=2100, max_price=2300, modal_price=2200, price_date='01/05/2024')
    assert store.count(MandiPrice) == 0


def test_same_day_quotes_from_several_sources_are_kept(store):
    add_price(store, 'Wheat', 2200, source='AgMarkNet')
    add_price(store, 'Wheat', 2210, source='eNAM')
    assert len(store.prices_by_crop('wheat')) == 2


def test_prices_by_state_is_case_insensitive_substring(store):
    add_price(store, 'Onion', 2250, market='Nashik Mandi', state='Maharashtra')
    add_price(store, 'Wheat', 2200)
    assert [p.crop for p in store.prices_by_state('maha')] == ['Onion']


def test_notification_read_flag_only_moves_forward(store):
    note = _notify(store)
    assert store.mark_notification_read(note.id) is True
    assert store.find_by_id(Notification, note.id).is_read is True
    # marking again is harmless
    assert store.mark_notification_read(note.id) is True

    with pytest.raises(ValidationError):
        store.update(Notification, note.id, is_read=False)
    assert store.find_by_id(Notification, note.id).is_read is True


def test_mark_unknown_notification(store):
    assert store.mark_notification_read(404) is False


def test_notifications_for_user_newest_first(store):
    old = _notify(store, title='old')
    old.created_at = datetime.utcnow() - timedelta(hours=1)
    store.session.commit()
    _notify(store, title='new')
    read = _notify(store, title='read')
    store.mark_notification_read(read.id)

    titles = [n.title for n in store.notifications_for_user(1)]
    assert titles[-1] == 'old'
    assert set(titles) == {'old', 'new', 'read'}

    unread = [n.title for n in store.notifications_for_user(1, unread_only=True)]
    assert unread == ['new', 'old']


def test_events_by_type_respects_window(store):
    recent = store.log_event('mandi_price_update', {'totalUpdated': 3})
    stale = store.log_event('mandi_price_update', {'totalUpdated': 1})
    stale.created_at = datetime.utcnow() - timedelta(days=45)
    store.session.commit()
    store.log_event('login')

    events = store.events_by_type('mandi_price_update', days=30)
    assert [e.id for e in events] == [recent.id]
    assert store.count(AnalyticsEvent) == 3


def test_dashboard_stats(store):
    make_user(store)
    add_price(store, 'Wheat', 2200)
    stats = store.dashboard_stats()
    assert stats['totalUsers'] == 1
    assert stats['totalPrices'] == 1
    assert stats['totalDetections'] == 0
    assert stats['activeSchemes'] == 0


def test_crop_and_state_search_is_literal(store):
    add_price(store, 'Wheat', 2200, state='Haryana')
    assert store.prices_by_crop('%') == []
    assert store.prices_by_crop('_heat') == []
    assert store.prices_by_state('Har_ana') == []
    assert [p.crop for p in store.prices_by_crop('HEAT')] == ['Wheat']


def test_create_rejects_unknown_fields(store):
    with pytest.raises(ValidationError):
        store.create(Notification, user_id=1, title='Hello', message='msg', colour='red')
    assert store.count(Notification) == 0


def test_failed_update_commit_rolls_back(store):
    make_user(store, email='first@test.com')
    second = make_user(store, email='second@test.com')

    with pytest.raises(ValidationError):
        store.update(User, second.id, email='first@test.com')

    # session is still usable after the failed commit
    assert store.find_by_id(User, second.id).email == 'second@test.com'
    assert store.update(User, second.id, name='Renamed').name == 'Renamed'
