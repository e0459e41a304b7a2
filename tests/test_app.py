import io
import sqlite3
from datetime import timedelta

from pastelfeed import create_app
from pastelfeed.models import AuthSession, db, utcnow

from .conftest import register


def test_unknown_api_path(client):
    resp = client.get('/api/does-not-exist')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'API route not found', 'path': '/api/does-not-exist'}


def test_unknown_page_redirects_home(client):
    resp = client.get('/somewhere/else')
    assert resp.status_code == 302
    assert resp.headers['Location'].rstrip('/') in ('', 'http://localhost')


def test_wrong_method_on_api_is_json(alice):
    resp = alice.put('/api/messages', json={'message': 'x'})
    assert resp.status_code == 405
    assert 'error' in resp.get_json()


def test_pages_render(client):
    assert b'login-form' in client.get('/').data
    assert b'login-form' in client.get('/index.html').data
    assert b'message-form' in client.get('/feed').data
    assert b'letter-form' in client.get('/letter').data
    assert client.get('/feed.html').headers['Location'].endswith('/feed')
    assert client.get('/letter.html').headers['Location'].endswith('/letter')


def test_missing_upload_redirects_home(client):
    assert client.get('/uploads/feed/1/nothing.png').status_code == 302


def test_unexpected_error_hides_detail(app):
    def boom():
        raise RuntimeError('secret detail')

    app.add_url_rule('/api/boom', 'api_boom', boom)
    app.add_url_rule('/boom', 'page_boom', boom)
    client = app.test_client()

    resp = client.get('/api/boom')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Internal server error'}
    assert client.get('/boom').status_code == 302


def test_request_too_large_is_invalid_input(app, alice):
    app.config['MAX_CONTENT_LENGTH'] = 1024
    resp = alice.post('/api/upload/image', data={'image': (io.BytesIO(b'\0' * 4096), 'a.png', 'image/png')},
                      content_type='multipart/form-data')
    assert resp.status_code == 400


def test_old_user_table_is_patched(tmp_path):
    path = tmp_path / 'old.sqlite'
    conn = sqlite3.connect(path)
    conn.execute(
        'CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, username TEXT UNIQUE NOT NULL, '
        'password TEXT NOT NULL, email TEXT UNIQUE NOT NULL)'
    )
    conn.commit()
    conn.close()

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{path}',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })
    client = app.test_client()
    assert register(client, 'legacy').status_code == 200
    assert client.get('/api/session').get_json()['user']['photoUrl'] is None

    conn = sqlite3.connect(path)
    cols = {row[1] for row in conn.execute('PRAGMA table_info(users)')}
    conn.close()
    assert {'displayName', 'photoUrl', 'googleId', 'facebookId'} <= cols


def test_init_db_command(app):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Database ready' in result.output


def test_inspect_db_command_masks_passwords(app, alice):
    result = app.test_cli_runner().invoke(args=['inspect-db'])
    assert result.exit_code == 0
    assert '-- users' in result.output
    assert "'username': 'alice'" in result.output
    assert "'password': '***'" in result.output
    assert 'pbkdf2' not in result.output and 'scrypt' not in result.output


def test_init_db_command_purges_expired_sessions(app, alice, bob):
    with app.app_context():
        record = AuthSession.query.first()
        record.expires_at = utcnow() - timedelta(hours=1)
        db.session.commit()

    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Removed 1 expired sessions' in result.output
    with app.app_context():
        assert AuthSession.query.count() == 1
