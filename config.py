import os
from dotenv import load_dotenv

load_dotenv()

# Diretório base do projeto
basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ['true', '1', 'on', 'yes']


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'
    DEBUG = _env_bool('FLASK_DEBUG')

    # Database - caminho absoluto para o SQLite padrão
    INSTANCE_DIR = os.path.join(basedir, 'instance')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(INSTANCE_DIR, 'pinquest.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}

    # CORS / Socket.IO
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'threading')

    # Tokens
    JWT_EXPIRES_IN = int(os.environ.get('JWT_EXPIRES_IN', 30 * 24 * 3600))
    RESET_TOKEN_EXPIRES_IN = int(os.environ.get('RESET_TOKEN_EXPIRES_IN', 3600))
    VERIFICATION_TOKEN_EXPIRES_IN = int(os.environ.get('VERIFICATION_TOKEN_EXPIRES_IN', 86400))

    # Firebase (opcional) - sem project id a estratégia fica desativada
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')

    # Geocoding
    NOMINATIM_URL = os.environ.get('NOMINATIM_URL', 'https://nominatim.openstreetmap.org')
    GEOCODER_TIMEOUT = float(os.environ.get('GEOCODER_TIMEOUT', 5))
    GEOCODER_USER_AGENT = os.environ.get('GEOCODER_USER_AGENT', 'PinQuest/1.0')

    # Email
    SMTP_SERVER = os.environ.get('SMTP_SERVER', 'localhost')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USERNAME = os.environ.get('SMTP_USERNAME', '')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
    MAIL_FROM = os.environ.get('MAIL_FROM', 'PinQuest <no-reply@pinquest.app>')
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:5173')

    # Eventos de saída (notificações + broadcast)
    EVENTS_ASYNC = _env_bool('EVENTS_ASYNC', True)

    # App
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    DEFAULT_RADIUS_KM = 10.0
    DEFAULT_NEARBY_LIMIT = 20
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
