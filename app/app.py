"""
PinkStar - content marketplace
Application Factory e Inicialização
"""
import warnings
import os
import sys
import logging

# Suppress Flask-Limiter warnings (in-memory storage in development)
warnings.filterwarnings("ignore", category=UserWarning, module="flask_limiter")

import flask.cli
flask.cli.show_server_banner = lambda *args: None

# Core Flask imports
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import structlog

# Local imports
from constants import BUILD_VERSION, PINKSTAR_DB
from settings import reload_conf
from db import db, migrate, init_db
from auth import auth_blueprint, login_manager, init_users
from exceptions import register_exception_handlers
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs, get_or_create_secret_key

# Routes
from routes.admin import admin_bp
from routes.catalog import catalog_bp
from routes.profiles import profiles_bp
from routes.resources import resources_bp
from routes.reviews import reviews_bp

limiter = Limiter(key_func=get_remote_address)

# Logging configuration
formatter = ColoredFormatter(
    '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[handler]
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger('main')

# Apply filter to hide date from http access logs
logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())
logging.getLogger('alembic.runtime.migration').setLevel(logging.WARNING)


def create_app(config=None):
    """Application factory. `config` overrides the defaults (tests use an in-memory database)."""
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = PINKSTAR_DB
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JSON_SORT_KEYS'] = False
    if config:
        app.config.update(config)
    if not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = get_or_create_secret_key()

    # Initialize components
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize login manager
    login_manager.init_app(app)

    limiter.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(auth_blueprint)
    app.register_blueprint(admin_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(resources_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(profiles_bp)

    # Load settings
    reload_conf()

    # Initialize database
    init_db(app)
    init_users(app)

    return app


if __name__ == '__main__':
    app = create_app()
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info('Starting server on port 8465...')
    app.run(debug=False, use_reloader=False, host="0.0.0.0", port=8465)
