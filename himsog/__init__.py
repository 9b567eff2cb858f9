# Import important modules and create app package
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from himsog.config import config

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

def create_app(config_name='default'):
    # Initialize app
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'You must be logged in'}), 401

    # Register blueprints
    from himsog.booking.routes import booking_bp
    from himsog.provider.routes import provider_bp
    from himsog.main.routes import main_bp

    app.register_blueprint(booking_bp)
    app.register_blueprint(provider_bp)
    app.register_blueprint(main_bp)

    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        from himsog import models  # noqa: F401
        db.create_all()
        app.logger.info("Database tables created")

    return app

def register_error_handlers(app):
    """Turn scheduling errors into {success: false, error} responses"""
    from himsog.errors import SchedulingError

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception(f"Unhandled error: {error}")
        return jsonify({'success': False, 'error': 'Something went wrong. Please try again.'}), 500
