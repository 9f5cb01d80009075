"""Run one mandi price aggregation pass and print the summary."""
import json

from crop_support import create_app
from crop_support.config import Config
from crop_support.services import get_services


class ScriptConfig(Config):
    ENABLE_SCHEDULER = False


app = create_app(ScriptConfig)
with app.app_context():
    aggregator = get_services(app).aggregator
    result = aggregator.update_all_prices()
    print(json.dumps(result, indent=2))

    alerts = aggregator.check_price_alerts()
    print(f'{alerts["alertsTriggered"]} price alerts triggered')
    for note in alerts['notifications']:
        print(f'  user {note["userId"]}: {note["message"]}')
