# pinquest/__init__.py
import os
import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_cors import CORS
from flask_socketio import SocketIO

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO()

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object('config.Config')
    if overrides:
        app.config.update(overrides)

    # Handlers de socket precisam estar registrados antes do init_app
    from pinquest.routes import sockets  # noqa: F401

    # Inicializar extensões
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})
    socketio.init_app(app,
                      cors_allowed_origins=app.config['CORS_ORIGINS'],
                      async_mode=app.config['SOCKETIO_ASYNC_MODE'])

    # Importar modelos e configurar user_loader
    from pinquest.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    from pinquest.utils.auth import init_auth
    from pinquest.utils.errors import register_error_handlers
    from pinquest.utils.sanitize import init_sanitizer
    from pinquest.services.events import outbox

    init_auth(app)
    init_sanitizer(app)
    register_error_handlers(app)
    outbox.init_app(app)

    # Registrar blueprints
    from pinquest.routes import (auth, posts, users, feed, notifications,
                                 messages, reports, admin, analytics, maps, health)
    app.register_blueprint(auth.bp)
    app.register_blueprint(posts.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(feed.bp)
    app.register_blueprint(notifications.bp)
    app.register_blueprint(messages.bp)
    app.register_blueprint(reports.bp)
    app.register_blueprint(admin.bp)
    app.register_blueprint(analytics.bp)
    app.register_blueprint(maps.bp)
    app.register_blueprint(health.bp)

    # Criar diretórios necessários
    os.makedirs(app.config['INSTANCE_DIR'], exist_ok=True)

    logger.debug(f"PinQuest app criada (events_async={app.config['EVENTS_ASYNC']})")
    return app
