"""
Flask application factory and extension initialization.
"""
import logging

from flask import Flask
from flask_cors import CORS


def create_app(config_object=None, services=None, control=None):
    """
    Create and configure the Flask application.

    Args:
        config_object: Configuration class loaded with from_object; defaults to
            the development configuration
        services: Optional replacement for the subsystem configure operations
        control: Optional replacement for the Kea control socket client
    """
    app = Flask(__name__)

    # Configure app
    if config_object is None:
        from config import config
        config_object = config['default']
    app.config.from_object(config_object)

    # Configure logging first
    app.logger.setLevel('INFO')
    logging.getLogger('dhcpha').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize CORS with configured origins
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('CORS_ORIGINS', ["https://home.arpa"]),
            "supports_credentials": True,
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With", "Origin"],
            "methods": ["GET", "POST", "OPTIONS"],
        }
    })

    with app.app_context():
        from .dhcp.manager import DhcpHaManager
        app.logger.info(f"Loading configuration from {app.config['DHCPHA_CONFIG']}")
        app.extensions['dhcpha'] = DhcpHaManager(app.config, services=services, control=control)

    # Register blueprints
    from .dhcp import bp as dhcp_bp
    app.register_blueprint(dhcp_bp)

    # Register error handlers
    @app.errorhandler(404)
    def not_found_error(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def internal_error(error):
        return {'error': 'Internal server error'}, 500

    return app
