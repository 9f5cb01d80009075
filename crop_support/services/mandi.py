# Mandi Price Aggregation Service
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError
from datetime import datetime, timedelta

from crop_support.errors import ValidationError, NotFoundError
from crop_support.models import MandiPrice, Notification

logger = logging.getLogger(__name__)

TREND_DEADBAND = 2.0  # percent
ALERT_WINDOW = 7  # trailing rows compared by price_increase / price_decrease alerts


def _latest_first(rows):
    # sorted() is stable, so same-day rows keep insertion order
    return sorted(rows, key=lambda row: row.price_date, reverse=True)


class PriceAggregator:
    """Merges price rows from several sources into the store.

    Only one update may run at a time; a second caller is turned away
    immediately rather than queued.
    """

    def __init__(self, store, sources, update_interval=3600, fetch_timeout=10.0, price_alerts=None):
        self.store = store
        self.sources = list(sources)
        self.update_interval = update_interval
        self.fetch_timeout = fetch_timeout
        self.price_alerts = list(price_alerts or [])
        self.is_updating = False
        self.last_update_time = None
        self._run_lock = threading.Lock()

    # ==================== UPDATE ====================

    def update_all_prices(self):
        if not self._run_lock.acquire(blocking=False):
            return {
                'success': False,
                'totalUpdated': 0,
                'errors': ['Update already in progress'],
                'sources': [],
            }

        self.is_updating = True
        errors = []
        sources = []
        total_updated = 0
        try:
            executor = ThreadPoolExecutor(max_workers=max(len(self.sources), 1),
                                          thread_name_prefix='mandi-fetch')
            futures = {executor.submit(source.fetch): source for source in self.sources}
            try:
                for future in as_completed(futures, timeout=self.fetch_timeout):
                    source = futures[future]
                    try:
                        rows = future.result()
                    except Exception as e:
                        logger.warning('Price source %s failed: %s', source.name, e)
                        errors.append(f'{source.name}: {e}')
                        continue
                    sources.append(source.name)
                    total_updated += self._store_rows(rows, errors)
            except TimeoutError:
                for future, source in futures.items():
                    if not future.done():
                        logger.warning('Price source %s timed out after %ss', source.name, self.fetch_timeout)
                        errors.append(f'{source.name}: timed out after {self.fetch_timeout}s')
            finally:
                executor.shutdown(wait=False, cancel_futures=True)

            self.last_update_time = datetime.utcnow()
            self.store.log_event('mandi_price_update', {
                'totalUpdated': total_updated,
                'sources': len(sources),
                'errors': len(errors),
                'updateTime': self.last_update_time.isoformat(),
            })
            return {
                'success': not errors,
                'totalUpdated': total_updated,
                'errors': errors,
                'sources': sources,
            }
        finally:
            self.is_updating = False
            self._run_lock.release()

    def _store_rows(self, rows, errors):
        stored = 0
        for row in rows:
            try:
                self.store.create(MandiPrice, **row)
                stored += 1
            except ValidationError as e:
                errors.append(f'Database error for {row.get("crop", "unknown")}: {e.message}')
            except (TypeError, ValueError) as e:
                logger.warning('Malformed price row from source: %r', row)
                errors.append(f'Database error for {row.get("crop", "unknown")}: {e}')
        return stored

    def run_scheduled_update(self):
        logger.info('Starting scheduled mandi price update...')
        result = self.update_all_prices()
        logger.info('Mandi price update completed: success=%s totalUpdated=%d sources=%d errors=%d',
                    result['success'], result['totalUpdated'], len(result['sources']), len(result['errors']))

        alerts = self.check_price_alerts()
        if alerts['alertsTriggered'] > 0:
            logger.info('%d price alerts triggered', alerts['alertsTriggered'])
        return result

    def get_update_status(self):
        next_update = None
        if self.last_update_time is not None:
            next_update = self.last_update_time + timedelta(seconds=self.update_interval)
        return {
            'isUpdating': self.is_updating,
            'lastUpdateTime': self.last_update_time.isoformat() if self.last_update_time else None,
            'nextUpdateTime': next_update.isoformat() if next_update else None,
        }

    # ==================== VIEWS ====================

    def get_price_trends(self, crop, days=30):
        prices = _latest_first(self.store.prices_by_crop(crop))
        if not prices:
            raise NotFoundError(f'No price data found for {crop}')

        current_price = prices[0].modal_price
        previous_price = prices[1].modal_price if len(prices) > 1 else current_price
        change = current_price - previous_price
        change_percentage = (change / previous_price) * 100 if previous_price > 0 else 0.0

        trend = 'stable'
        if abs(change_percentage) > TREND_DEADBAND:
            trend = 'up' if change_percentage > 0 else 'down'

        return {
            'crop': crop,
            'currentPrice': current_price,
            'previousPrice': previous_price,
            'change': change,
            'changePercentage': round(change_percentage, 2),
            'trend': trend,
            'history': [{'date': p.price_date, 'price': p.modal_price} for p in prices[:max(days, 0)]],
        }

    def compare_prices_across_markets(self, crop):
        prices = self.store.prices_by_crop(crop)
        if not prices:
            raise NotFoundError(f'No price data found for {crop}')

        latest = {}
        for price in prices:
            key = (price.market, price.state)
            existing = latest.get(key)
            if existing is None or price.price_date > existing.price_date:
                latest[key] = price

        ranked = sorted(latest.values(), key=lambda p: p.modal_price, reverse=True)
        markets = [
            {
                'market': p.market,
                'state': p.state,
                'price': p.modal_price,
                'date': p.price_date,
                'rank': index,
            }
            for index, p in enumerate(ranked, start=1)
        ]

        return {
            'crop': crop,
            'markets': markets,
            'highestPrice': {'market': markets[0]['market'], 'price': markets[0]['price']},
            'lowestPrice': {'market': markets[-1]['market'], 'price': markets[-1]['price']},
            'averagePrice': sum(m['price'] for m in markets) / len(markets),
        }

    # ==================== ALERTS ====================

    def _alert_rows(self, alert):
        rows = self.store.prices_by_crop(alert['crop'])
        state = alert.get('state')
        market = alert.get('market')
        if state:
            rows = [row for row in rows if row.state.lower() == state.lower()]
        if market:
            rows = [row for row in rows if row.market.lower() == market.lower()]
        return _latest_first(rows)

    def _evaluate_alert(self, alert, prices):
        latest = prices[0]
        crop = alert['crop']
        alert_type = alert.get('alertType')

        if alert_type == 'threshold' and alert.get('threshold'):
            if latest.modal_price >= alert['threshold']:
                return (f'{crop} price has reached ₹{latest.modal_price:g}/quintal, '
                        f'crossing your threshold of ₹{alert["threshold"]:g}/quintal')
            return None

        if alert_type in ('price_increase', 'price_decrease') and alert.get('percentage'):
            previous = prices[1:ALERT_WINDOW + 1]
            if not previous:
                return None
            average = sum(p.modal_price for p in previous) / len(previous)
            if average <= 0:
                return None
            movement = ((latest.modal_price - average) / average) * 100
            if alert_type == 'price_increase' and movement >= alert['percentage']:
                return f'{crop} price increased by {movement:.1f}% to ₹{latest.modal_price:g}/quintal'
            if alert_type == 'price_decrease' and -movement >= alert['percentage']:
                return f'{crop} price decreased by {-movement:.1f}% to ₹{latest.modal_price:g}/quintal'
        return None

    def check_price_alerts(self):
        notifications = []
        for alert in self.price_alerts:
            prices = self._alert_rows(alert)
            if not prices:
                continue
            message = self._evaluate_alert(alert, prices)
            if message is None:
                continue

            notifications.append({'userId': alert['userId'], 'message': message, 'type': 'price_update'})
            self.store.create(
                Notification,
                user_id=alert['userId'],
                title=f'Price Alert: {alert["crop"]}',
                message=message,
                type='price_update',
                priority='medium',
                is_read=False,
            )

        return {'alertsTriggered': len(notifications), 'notifications': notifications}
