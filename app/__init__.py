from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager, current_user
from flask_migrate import Migrate
import newrelic.agent

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

def create_app(config_overrides=None):
    app = Flask(__name__)

    # Configuration
    from app.config import Config
    app.config.from_mapping(Config.from_env().to_flask_config())
    if config_overrides:
        app.config.update(config_overrides)

    # Setup logging
    from app.logging_config import setup_logging
    setup_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    from app.services.security_service import register_request_guards
    register_request_guards(app)

    from app.services.error_handler import create_error_handlers
    create_error_handlers(app)

    # New Relic Custom Attributes for User Tracking
    @app.before_request
    def add_newrelic_user_attributes():
        """Add user information as custom attributes to New Relic for error tracking"""
        if current_user.is_authenticated:
            newrelic.agent.add_custom_attribute('enduser.id', str(current_user.id))
            newrelic.agent.add_custom_attribute('user', current_user.username)
            newrelic.agent.add_custom_attribute('role', current_user.role)

    # Register blueprints
    from app.routes import main, auth, users, recovery, products, categories, orders, newsletter
    app.register_blueprint(main.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(auth.register_bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(recovery.bp)
    app.register_blueprint(products.bp)
    app.register_blueprint(categories.bp)
    app.register_blueprint(orders.bp)
    app.register_blueprint(newsletter.bp)

    return app
