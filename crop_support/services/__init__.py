# Application services
from flask import current_app

from crop_support.ml import DiseaseDetector
from crop_support.services.mandi import PriceAggregator
from crop_support.services.mandi_sources import default_sources
from crop_support.services.scheduler import TaskRunner
from crop_support.services.schemes import SchemesService
from crop_support.store import RecordStore

EXTENSION_KEY = 'crop_support'


class Services:
    """Everything a view needs, built once per application."""

    def __init__(self, store, aggregator, schemes, detector, tasks):
        self.store = store
        self.aggregator = aggregator
        self.schemes = schemes
        self.detector = detector
        self.tasks = tasks


def init_services(app, sources=None):
    config = app.config
    store = RecordStore()
    aggregator = PriceAggregator(
        store,
        sources if sources is not None else default_sources(config['MANDI_FETCH_DELAY']),
        update_interval=config['MANDI_UPDATE_INTERVAL'],
        fetch_timeout=config['MANDI_FETCH_TIMEOUT'],
        price_alerts=config['PRICE_ALERTS'],
    )
    services = Services(
        store=store,
        aggregator=aggregator,
        schemes=SchemesService(store, update_delay=config['SCHEME_UPDATE_DELAY']),
        detector=DiseaseDetector(
            max_image_size=config['AI_MAX_IMAGE_SIZE'],
            processing_delay=config['DETECTION_DELAY'],
        ),
        tasks=TaskRunner(app),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services(app=None):
    return (app or current_app).extensions[EXTENSION_KEY]


def task_definitions(app):
    """Task name -> (interval in seconds, action)"""
    services = get_services(app)
    return {
        'mandi-prices': (app.config['MANDI_UPDATE_INTERVAL'], services.aggregator.run_scheduled_update),
        'schemes': (app.config['SCHEMES_UPDATE_INTERVAL'], services.schemes.update_scheme_data),
    }


def start_default_tasks(app):
    tasks = get_services(app).tasks
    for name, (interval, action) in task_definitions(app).items():
        tasks.start(name, interval, action)
