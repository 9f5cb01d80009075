# Mandi price sources
import random
import time
from datetime import date


class PriceSource:
    """A named upstream that yields mandi price rows.

    The bundled sources return fixed sample quotes after a simulated network
    delay; rows carry today's date and the source name.
    """

    def __init__(self, name, url, rows, delay=(1.0, 3.0), rng=None):
        self.name = name
        self.url = url
        self._rows = rows
        self.delay = delay
        self._rng = rng or random.Random()

    def fetch(self):
        low, high = self.delay
        if high > 0:
            time.sleep(self._rng.uniform(low, high))
        today = date.today().isoformat()
        return [dict(row, price_date=today, unit='per quintal', source=self.name) for row in self._rows]

    def __repr__(self):
        return f'<PriceSource {self.name}>'


AGMARKNET_ROWS = [
    {'crop': 'Wheat', 'variety': 'HD-2967', 'market': 'Karnal Mandi', 'state': 'Haryana',
     'district': 'Karnal', 'min_price': 2100, 'max_price': 2300, 'modal_price': 2200},
    {'crop': 'Rice', 'variety': 'Basmati', 'market': 'Amritsar Mandi', 'state': 'Punjab',
     'district': 'Amritsar', 'min_price': 3500, 'max_price': 4000, 'modal_price': 3750},
    {'crop': 'Tomato', 'variety': 'Hybrid', 'market': 'Delhi Azadpur Mandi', 'state': 'Delhi',
     'district': 'Delhi', 'min_price': 800, 'max_price': 1200, 'modal_price': 1000},
]

ENAM_ROWS = [
    {'crop': 'Onion', 'variety': 'Nasik Red', 'market': 'Nashik Mandi', 'state': 'Maharashtra',
     'district': 'Nashik', 'min_price': 2000, 'max_price': 2500, 'modal_price': 2250},
    {'crop': 'Potato', 'variety': 'Jyoti', 'market': 'Agra Mandi', 'state': 'Uttar Pradesh',
     'district': 'Agra', 'min_price': 1200, 'max_price': 1500, 'modal_price': 1350},
]

DATA_GOV_ROWS = [
    {'crop': 'Cotton', 'variety': 'Shankar-6', 'market': 'Guntur Mandi', 'state': 'Andhra Pradesh',
     'district': 'Guntur', 'min_price': 5800, 'max_price': 6200, 'modal_price': 6000},
    {'crop': 'Sugarcane', 'variety': 'Co-86032', 'market': 'Muzaffarnagar Mandi', 'state': 'Uttar Pradesh',
     'district': 'Muzaffarnagar', 'min_price': 280, 'max_price': 320, 'modal_price': 300},
]


def default_sources(delay=(1.0, 3.0)):
    return [
        PriceSource('AgMarkNet', 'https://agmarknet.gov.in/SearchCmmMkt.aspx', AGMARKNET_ROWS, delay),
        PriceSource('eNAM', 'https://enam.gov.in/web/dhanyakothi/home', ENAM_ROWS, delay),
        PriceSource('Data.gov.in', 'https://api.data.gov.in/resource/9ef84268-d588-465a-a308-a864a43d0070',
                    DATA_GOV_ROWS, delay),
    ]
