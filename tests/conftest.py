import pytest

from pastelfeed import create_app

MB = 1024 * 1024


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'pastelfeed.sqlite'}",
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username='alice', password='s3cret-pass', email=None):
    return client.post('/api/register', json={
        'username': username,
        'password': password,
        'email': email or f'{username}@example.com',
    })


@pytest.fixture
def alice(app):
    c = app.test_client()
    assert register(c, 'alice').status_code == 200
    return c


@pytest.fixture
def bob(app):
    c = app.test_client()
    assert register(c, 'bob').status_code == 200
    return c
