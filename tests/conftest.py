"""
Pytest config.

Each test gets a fresh app bound to its own SQLite file under tmp_path, with
both OAuth providers configured so their routes are live. Nothing here talks
to the network; OAuth tests stub the provider calls themselves.
"""

from __future__ import annotations

import pytest

from secretboard import create_app
from secretboard.models import db


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'GOOGLE_CLIENT_ID': 'google-client-id',
        'GOOGLE_CLIENT_SECRET': 'google-client-secret',
        'GOOGLE_CALLBACK_URL': 'http://localhost/auth/google/secrets',
        'FACEBOOK_CLIENT_ID': 'facebook-app-id',
        'FACEBOOK_CLIENT_SECRET': 'facebook-app-secret',
        'FACEBOOK_CALLBACK_URL': 'http://localhost/auth/facebook/secrets',
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


class AuthActions:
    def __init__(self, client):
        self._client = client

    def register(self, username='alice@example.com', password='hunter2'):
        return self._client.post('/register', data={'username': username, 'password': password})

    def login(self, username='alice@example.com', password='hunter2'):
        return self._client.post('/login', data={'username': username, 'password': password})

    def logout(self):
        return self._client.get('/logout')


@pytest.fixture()
def auth(client):
    return AuthActions(client)
