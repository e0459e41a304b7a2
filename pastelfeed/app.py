import logging
import os

from flask import Flask
from flask_cors import CORS

from . import cli
from .auth import auth_bp
from .config import Config
from .errors import register_error_handlers
from .images_api import images_bp
from .letter_api import letter_bp
from .messages_api import messages_bp
from .models import db, init_db
from .pages import pages_bp
from .profile_api import profile_bp
from .saved_items_api import saved_items_bp
from .storage import LocalFileStore


def _configure_logging(app):
    if not logging.getLogger().handlers:
        logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s - %(message)s')
    level = 'DEBUG' if app.debug else app.config['LOG_LEVEL']
    app.logger.setLevel(level)


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    os.makedirs(app.instance_path, exist_ok=True)
    if not app.config.get('UPLOAD_FOLDER'):
        app.config['UPLOAD_FOLDER'] = os.path.join(app.instance_path, 'uploads')
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    _configure_logging(app)

    db.init_app(app)
    app.extensions['pastelfeed.files'] = LocalFileStore(app.config['UPLOAD_FOLDER'])
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}}, supports_credentials=True)

    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(messages_bp)
    app.register_blueprint(saved_items_bp)
    app.register_blueprint(letter_bp)
    app.register_blueprint(images_bp)
    app.register_blueprint(pages_bp)

    register_error_handlers(app)
    cli.init_app(app)

    # schema and column patches run once, before any request
    with app.app_context():
        added = init_db()
    if added:
        app.logger.info(f"Added missing user columns: {', '.join(added)}")
    app.logger.debug('Application created and configured')

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(port=int(os.getenv('PORT', '3001')), debug=True)
