import logging
import os

from flask import Flask

from .config import load_config
from .models import db
from .auth import auth_bp, init_app as init_auth
from .oauth import oauth_bp, enabled_providers
from .pages import pages_bp


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.update(load_config())
    if config:
        app.config.update(config)
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), None)
    # logging also exposes non-level constants like BASIC_FORMAT
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)

    # relative sqlite paths land in the instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    init_auth(app)

    @app.before_request
    def create_tables():
        if not hasattr(app, 'db_initialized'):
            db.create_all()
            app.db_initialized = True

    @app.context_processor
    def inject_oauth_providers():
        return {'oauth_providers': enabled_providers()}

    # ---------------- Blueprints ----------------
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(oauth_bp)

    return app


def main():
    app = create_app()
    port = app.config['PORT']
    app.logger.info('Server starting on port %s', port)
    app.run(host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
