# Flask Application Factory
import atexit
import logging

from flask import Flask, request, jsonify, current_app
from flask_cors import CORS
from flask_login import LoginManager

from crop_support.config import Config
from crop_support.errors import register_error_handlers
from crop_support.models import db, User
from crop_support.utils.security import bearer_token, decode_access_token

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    token = bearer_token(req.headers.get('Authorization'))
    if token is None:
        return None
    user_id = decode_access_token(token, current_app.config['JWT_SECRET'])
    if user_id is None:
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': 'Authentication required'}), 401


def create_app(config_class=Config, sources=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})
    register_error_handlers(app)

    from crop_support.services import init_services, start_default_tasks
    services = init_services(app, sources=sources)

    # Create database tables and seed demo data
    with app.app_context():
        db.create_all()
        app.logger.info('Database tables created/verified')
        if app.config['SEED_DEMO_DATA']:
            from crop_support.seed import seed_demo_data
            seed_demo_data(services.store, bcrypt_rounds=app.config['BCRYPT_ROUNDS'])

    # Register blueprints
    from crop_support.routes.main import main_bp
    from crop_support.routes.auth import auth_bp
    from crop_support.routes.detection import detection_bp
    from crop_support.routes.schemes import schemes_bp
    from crop_support.routes.mandi import mandi_bp
    from crop_support.routes.weather import weather_bp
    from crop_support.routes.notifications import notifications_bp
    from crop_support.routes.admin import admin_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(detection_bp, url_prefix='/api/disease-detection')
    app.register_blueprint(schemes_bp, url_prefix='/api/government-schemes')
    app.register_blueprint(mandi_bp, url_prefix='/api/mandi-prices')
    app.register_blueprint(weather_bp, url_prefix='/api/weather')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    if app.config['ENABLE_SCHEDULER']:
        start_default_tasks(app)
        atexit.register(services.tasks.shutdown)

    @app.before_request
    def log_request():
        app.logger.debug('%s %s', request.method, request.path)

    return app
