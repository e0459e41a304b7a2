import secrets
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request, session
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import Conflict, Unauthorized
from .models import AuthSession, User, db, utcnow
from .schemas import LoginRequest, RegisterRequest, parse_body

auth_bp = Blueprint('auth', __name__, url_prefix='/api')

INVALID_CREDENTIALS = 'Invalid username or password'


def _lifetime():
    return current_app.config['PERMANENT_SESSION_LIFETIME']


def register_user(username, password, email):
    """Create an account. Raises Conflict when the username or email is taken."""
    username = username.strip()
    email = email.strip().lower()

    existing = User.query.filter((User.username == username) | (User.email == email)).first()
    if existing:
        if existing.username == username:
            raise Conflict('Username is already taken')
        raise Conflict('Email is already registered')

    user = User(
        username=username,
        email=email,
        password_hash=generate_password_hash(password),
        display_name=username,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        db.session.rollback()
        raise Conflict('Username or email already exists') from None
    current_app.logger.info(f'Registered user {username} (id={user.id})')
    return user


def authenticate(username, password):
    """
    Check a username/password pair. Unknown users and wrong passwords
    fail the same way so callers cannot tell them apart.
    """
    user = User.query.filter_by(username=(username or '').strip()).first()
    if not user or not check_password_hash(user.password_hash, password or ''):
        current_app.logger.warning(f'Rejected login for {username!r}')
        raise Unauthorized(INVALID_CREDENTIALS)
    return user


def purge_expired_sessions():
    """Delete every session row past its expiry. Returns how many were removed."""
    removed = AuthSession.query.filter(AuthSession.expires_at <= utcnow()).delete()
    db.session.commit()
    return removed


def start_session(user):
    """Issue a fresh server-side session for ``user`` and bind it to the cookie."""
    end_session()
    purge_expired_sessions()
    sid = secrets.token_urlsafe(32)
    db.session.add(AuthSession(id=sid, user_id=user.id, expires_at=utcnow() + _lifetime()))
    db.session.commit()

    session.clear()
    session.permanent = True
    session['sid'] = sid
    session['user_id'] = user.id
    g.user = user
    g.sid = sid
    return sid


def end_session():
    """Destroy the current session, if any. Safe to call without one."""
    sid = session.get('sid')
    if sid:
        AuthSession.query.filter_by(id=sid).delete()
        db.session.commit()
    session.clear()
    g.user = None
    g.sid = None


def current_user():
    """The logged-in user for this request, or None."""
    return g.get('user')


@auth_bp.before_app_request
def load_logged_in_user():
    current_app.logger.debug(f'{request.method} {request.path}')
    g.user = None
    g.sid = None
    if request.endpoint == 'static':
        return

    sid = session.get('sid')
    if not sid:
        return

    record = db.session.get(AuthSession, sid)
    now = utcnow()
    if record is None or record.expires_at <= now:
        if record is not None:
            db.session.delete(record)
            db.session.commit()
        session.clear()
        return

    user = db.session.get(User, record.user_id)
    if user is None:
        db.session.delete(record)
        db.session.commit()
        session.clear()
        return

    # rolling expiry
    record.expires_at = now + _lifetime()
    db.session.commit()
    g.user = user
    g.sid = sid


def login_required(view):
    """Decorator for API handlers that require an authenticated user."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get('user') is None:
            raise Unauthorized('Unauthorized')
        return view(*args, **kwargs)
    return wrapped


@auth_bp.route('/register', methods=['POST'])
def register():
    body = parse_body(RegisterRequest)
    user = register_user(body.username, body.password, body.email)
    start_session(user)
    return jsonify({
        'success': True,
        'user': user.to_dict(),
        'message': 'User registered successfully',
    })


@auth_bp.route('/login', methods=['POST'])
def login():
    body = parse_body(LoginRequest)
    user = authenticate(body.username, body.password)
    sid = start_session(user)
    current_app.logger.info(f'Logged in {user.username}')
    return jsonify({'success': True, 'user': user.to_dict(), 'sessionID': sid})


@auth_bp.route('/session', methods=['GET'])
def session_status():
    user = current_user()
    if user is None:
        return jsonify({'loggedIn': False, 'message': 'No active session'}), 401
    return jsonify({'loggedIn': True, 'user': user.to_dict(), 'sessionID': g.sid})


@auth_bp.route('/logout', methods=['GET'])
def logout():
    user = current_user()
    end_session()
    if user is not None:
        current_app.logger.info(f'Logged out {user.username}')
    return jsonify({'success': True})
