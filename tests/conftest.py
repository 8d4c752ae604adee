"""
Shared pytest fixtures for account system tests.
"""
import pytest
import os
import sys

# Add project root and tests directory to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
tests_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)
sys.path.insert(0, tests_dir)

# ============================================================================
# Configuration
# ============================================================================

TRUSTED_ORIGIN = 'https://app.example'

JSON_HEADERS = {'Accept': 'application/json'}

# Centralized test user credentials
TEST_USERS = {
    'alice': {
        'email': 'test_alice@example.com',
        'password': 'TestPass123!',
        'name': 'Alice Smith',
    },
    'bob': {
        'email': 'test_bob@example.com',
        'password': 'TestPass123!',
        'name': 'Bob Johnson',
    },
}


# ============================================================================
# Flask App Fixtures
# ============================================================================

@pytest.fixture
def app():
    """Create a fresh Flask app (and empty in-memory database) per test."""
    from app import create_app
    flask_app = create_app('testing')
    assert flask_app.config['SITE_URL'] == TRUSTED_ORIGIN
    return flask_app


@pytest.fixture
def db(app):
    """Get database instance."""
    from extensions import db as _db
    return _db


@pytest.fixture
def app_context(app):
    """Provide app context for database operations."""
    with app.app_context():
        yield


@pytest.fixture
def request_context(app):
    """Provide a request context, needed wherever login_user is called."""
    with app.test_request_context('/en/login'):
        yield


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def controller(app):
    """The app's AuthSessionController."""
    from services.auth_service import EXTENSION_KEY
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def settings(controller):
    return controller.settings


@pytest.fixture
def make_user(app, db):
    """Factory fixture to insert an account directly."""
    from contextlib import nullcontext
    from flask import has_app_context
    from models import User
    from werkzeug.security import generate_password_hash

    def _make(user_key='alice', role='user', **fields):
        user_data = TEST_USERS[user_key]
        with nullcontext() if has_app_context() else app.app_context():
            user = User(
                email=user_data['email'],
                name=user_data['name'],
                role=role,
                password_hash=generate_password_hash(user_data['password'], method='pbkdf2:sha256'),
                **fields
            )
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture
def register(client):
    """Factory fixture to register a user through the JSON API."""
    def _register(email, password, locale='en', **extra):
        return client.post(
            f'/{locale}/register',
            json={'email': email, 'password': password, **extra},
            headers=JSON_HEADERS,
        )

    return _register


@pytest.fixture
def login(client):
    """Factory fixture to log in through the JSON API."""
    def _login(email, password, locale='en'):
        return client.post(
            f'/{locale}/login',
            json={'email': email, 'password': password},
            headers=JSON_HEADERS,
        )

    return _login


class FrozenClock:
    """Manually advanced clock for token lifetime tests."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now = self.now + delta
