from flask import Blueprint, current_app, g, jsonify, request

from .auth import login_required
from .errors import InvalidInput, NotFound
from .models import User, db
from .schemas import ProfileUpdateRequest, parse_body
from .storage import get_file_store

profile_bp = Blueprint('profile_api', __name__, url_prefix='/api/profile')


def update_display_name(user_id, name):
    if not name or not name.strip():
        raise InvalidInput('Invalid display name')
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User not found')
    user.display_name = name
    db.session.commit()
    current_app.logger.info(f'Display name updated for user {user_id}')
    return user


def update_photo(user_id, data, mimetype, original_filename):
    """
    Store a new profile photo and point the user at it. The file is
    validated before anything is written; the previous photo stays on disk.
    """
    store = get_file_store()
    store.check('profile', data, mimetype)
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User not found')

    stored = store.save('profile', user_id, data, mimetype, original_filename)
    user.photo_url = stored.url
    db.session.commit()
    current_app.logger.info(f'Profile photo updated for user {user_id}: {stored.url}')
    return stored


@profile_bp.route('', methods=['POST'])
@login_required
def update_profile():
    body = parse_body(ProfileUpdateRequest)
    user = update_display_name(g.user.id, body.display_name)
    return jsonify({'success': True, 'displayName': user.display_name})


@profile_bp.route('/photo', methods=['POST'])
@login_required
def upload_photo():
    upload = request.files.get('photo')
    if upload is None or not upload.filename:
        raise InvalidInput('No file provided')
    user_id = g.user.id
    stored = update_photo(user_id, upload.read(), upload.mimetype, upload.filename)
    return jsonify({
        'success': True,
        'photoUrl': stored.url,
        'userId': user_id,
        'fileName': stored.filename,
    })
