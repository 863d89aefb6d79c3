"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from catalog_admin.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize Sentry for error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # CORS for the SPA client
    from catalog_admin.middleware import handle_preflight, apply_cors_headers
    app.before_request(handle_preflight)
    app.after_request(apply_cors_headers)

    # Error Handlers
    from catalog_admin.exceptions import CatalogError

    @app.errorhandler(CatalogError)
    def handle_catalog_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"CatalogError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"CatalogError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Render routing errors (404, 405, 413...) with the JSON envelope."""
        return jsonify({'success': False, 'message': error.name, 'error': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'success': False, 'error': 'Internal Server Error'}), 500

    # Register blueprints
    from catalog_admin.blueprints.main import main_bp
    from catalog_admin.blueprints.categories import categories_bp
    from catalog_admin.blueprints.products import products_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)

    # Register CLI commands
    from catalog_admin.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"S3_ENDPOINT={app.config.get('S3_ENDPOINT')} S3_BUCKET={app.config.get('S3_BUCKET')}")

    return app
