# Mandi Price Routes
from flask import Blueprint, request, jsonify

from crop_support.errors import ValidationError
from crop_support.models import MandiPrice
from crop_support.services import get_services

mandi_bp = Blueprint('mandi', __name__)


@mandi_bp.route('', methods=['GET'])
def list_prices():
    crop = request.args.get('crop', 'all')
    state = request.args.get('state', 'all')
    market = request.args.get('market', 'all')
    limit = max(request.args.get('limit', 50, type=int), 0)
    action = request.args.get('action')

    services = get_services()
    aggregator = services.aggregator

    if action in ('trends', 'compare') and crop == 'all':
        raise ValidationError('A crop is required')

    if action == 'trends':
        days = max(request.args.get('days', 30, type=int), 1)
        return jsonify({'success': True, 'trends': aggregator.get_price_trends(crop, days)})

    if action == 'compare':
        return jsonify({'success': True, 'comparison': aggregator.compare_prices_across_markets(crop)})

    if action == 'update':
        result = aggregator.update_all_prices()
        return jsonify({'success': result['success'], 'result': result})

    if action == 'status':
        return jsonify({'success': True, 'status': aggregator.get_update_status()})

    if action == 'alerts':
        return jsonify({'success': True, 'alerts': aggregator.check_price_alerts()})

    # Filtered listing
    criteria = []
    if crop != 'all':
        criteria.append(MandiPrice.crop.icontains(crop, autoescape=True))
    if state != 'all':
        criteria.append(MandiPrice.state.icontains(state, autoescape=True))
    if market != 'all':
        criteria.append(MandiPrice.market.icontains(market, autoescape=True))

    store = services.store
    prices = sorted(store.filter_by(MandiPrice, *criteria), key=lambda p: p.price_date, reverse=True)
    everything = store.filter_by(MandiPrice)

    return jsonify({
        'success': True,
        'prices': [p.to_dict() for p in prices[:limit]],
        'total': len(prices),
        'filters': {
            'crops': sorted({p.crop for p in everything}),
            'states': sorted({p.state for p in everything}),
            'markets': sorted({p.market for p in everything}),
        },
        'lastUpdated': aggregator.get_update_status()['lastUpdateTime'],
    })


@mandi_bp.route('', methods=['POST'])
def trigger_update():
    result = get_services().aggregator.update_all_prices()
    return jsonify({
        'success': result['success'],
        'message': f'Updated {result["totalUpdated"]} prices from {len(result["sources"])} sources',
        'result': result,
    })
