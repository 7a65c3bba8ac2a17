"""
Pytest fixtures for the POS backend tests.

Provides an in-memory SQLite app, a per-test wipe of all tables,
user/product factories and bearer-token helpers.
"""

from decimal import Decimal

import pytest

from discpos import create_app
from discpos.extensions import db, socketio
from discpos.models import User, Product
from discpos.services.auth_service import hash_password
from discpos.services import token_service
from discpos.services.realtime_service import get_registry


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET_KEY': 'test-jwt-secret',
        'BCRYPT_ROUNDS': 4,
        'ALLOW_NEGATIVE_STOCK': False,
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table (and the presence registry) before each test."""
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    get_registry().clear()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def socket_client(app, client):
    """Factory for Socket.IO test clients; all are disconnected after the test."""
    created = []

    def _connect():
        sc = socketio.test_client(app, flask_test_client=client)
        created.append(sc)
        return sc

    yield _connect

    for sc in created:
        if sc.is_connected():
            sc.disconnect()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Insert a user directly, bypassing the registration rules."""
    def _make(email, role="cashier", status="active", full_name=None, password="pw"):
        user = User(
            full_name=full_name or email.split("@")[0].title(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            status=status,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture(scope='function')
def superadmin(make_user):
    return make_user("alice@x.com", role="superadmin", full_name="Alice")


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user("admin@x.com", role="admin", full_name="Ada Admin")


@pytest.fixture(scope='function')
def cashier(make_user):
    return make_user("carl@x.com", role="cashier", full_name="Carl")


@pytest.fixture(scope='function')
def admin_headers(superadmin):
    return auth_headers(token_service.issue_token(superadmin))


@pytest.fixture(scope='function')
def cashier_headers(cashier):
    return auth_headers(token_service.issue_token(cashier))


@pytest.fixture(scope='function')
def make_product(db_session):
    def _make(name="CD-A", stock=20, purchase_price="5.00", selling_price="10.00", category="CD"):
        product = Product(
            name=name,
            category=category,
            purchase_price=Decimal(purchase_price),
            selling_price=Decimal(selling_price),
            stock=stock,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


def get_auth_token(client, email: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.get_json().get('token')
    return None


def auth_headers(token: str, socket_id: str | None = None) -> dict:
    """Helper to create Authorization headers."""
    headers = {'Authorization': f'Bearer {token}'}
    if socket_id:
        headers['X-Socket-ID'] = socket_id
    return headers


@pytest.fixture
def login(client):
    """Log in through the API and return the bearer token (None on failure)."""
    def _login(email, password="pw"):
        return get_auth_token(client, email, password)
    return _login


@pytest.fixture
def headers_for(app):
    """Authorization headers for a user, optionally tagged with a socket sid."""
    def _headers(user, socket_id=None):
        return auth_headers(token_service.issue_token(user), socket_id)
    return _headers


@pytest.fixture
def events():
    """Payloads of every `name` event queued for a Socket.IO test client."""
    def _events(socket, name):
        return [e['args'][0] for e in socket.get_received() if e['name'] == name]
    return _events
