# tests/conftest.py
"""
Fixtures compartilhados para todos os testes da PinQuest
"""
import os
import pytest
from flask import g, has_app_context
from flask.testing import FlaskClient

# Forçar variáveis de ambiente ANTES de importar a app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing'

from pinquest import create_app, db as _db, socketio
from pinquest.models import User, Post
from pinquest.utils.security import generate_api_token

# Torre Eiffel
EIFFEL_LAT = 48.8584
EIFFEL_LNG = 2.2945


class ApiClient(FlaskClient):
    """
    Cliente HTTP dos testes

    As requisições reaproveitam o app context do fixture db, então o usuário que o
    Flask-Login guarda em g precisa ser descartado a cada chamada.
    """

    def open(self, *args, **kwargs):
        if has_app_context():
            g.pop('_login_user', None)
        return super().open(*args, **kwargs)


@pytest.fixture(scope='function')
def app():
    """Cria a aplicação Flask para testes"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'SECRET_KEY': 'test-secret-key-for-testing',
        'EVENTS_ASYNC': False,
        'FIREBASE_PROJECT_ID': None,
        'SMTP_PASSWORD': '',
    })
    app.test_client_class = ApiClient
    return app


@pytest.fixture(scope='function')
def db(app):
    """Cria e limpa o banco de dados para cada teste"""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    """Cliente de teste HTTP"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def app_context(app, db):
    """Contexto da aplicação"""
    yield app


def make_user(db, name, email, password='TestPass123', role='user'):
    user = User(name=name, email=email, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def make_post(db, author, title='Test Post', latitude=EIFFEL_LAT, longitude=EIFFEL_LNG, **kwargs):
    post = Post(
        title=title,
        description=kwargs.pop('description', f'{title} description'),
        latitude=latitude,
        longitude=longitude,
        posted_by_id=author.id,
        **kwargs
    )
    db.session.add(post)
    db.session.commit()
    return post


@pytest.fixture
def user(db):
    """Cria um usuário de teste"""
    return make_user(db, 'Test User', 'user@test.com')


@pytest.fixture
def other_user(db):
    """Cria um segundo usuário"""
    return make_user(db, 'Other User', 'other@test.com', 'OtherPass123')


@pytest.fixture
def admin_user(db):
    """Cria um admin de teste"""
    return make_user(db, 'Admin User', 'admin@test.com', 'AdminPass123', role='admin')


@pytest.fixture
def post(db, user):
    """Post publicado na Torre Eiffel"""
    return make_post(db, user, 'Eiffel Tower', category='landmark')


@pytest.fixture
def auth_headers(app):
    """Factory de headers Bearer para um usuário"""
    def _headers(user):
        return {'Authorization': f'Bearer {generate_api_token(user.id)}'}
    return _headers


@pytest.fixture
def socket_client(app, db):
    """Factory de clientes Socket.IO (com token opcional)"""
    clients = []

    def _connect(user=None):
        auth = {'token': generate_api_token(user.id)} if user else None
        client = socketio.test_client(app, auth=auth)
        clients.append(client)
        return client

    yield _connect
    for client in clients:
        if client.is_connected():
            client.disconnect()


def refresh(db, obj):
    """Recarrega o objeto depois de alterações feitas por outra sessão/requisição"""
    db.session.expire_all()
    return db.session.get(type(obj), obj.id)
