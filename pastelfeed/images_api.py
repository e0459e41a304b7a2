from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .auth import login_required
from .errors import InvalidInput, NotFound
from .models import UploadedImage, db, utcnow
from .storage import get_file_store

images_bp = Blueprint('images_api', __name__, url_prefix='/api')


def record_upload(user_id, purpose, stored):
    """Remember ``stored`` as the user's image for ``purpose``, replacing any earlier one."""
    table = UploadedImage.__table__
    now = utcnow()
    stmt = sqlite_insert(table).values(
        userId=user_id, purpose=purpose, filename=stored.filename, path=stored.path, createdAt=now,
    ).on_conflict_do_update(
        index_elements=[table.c.userId, table.c.purpose],
        set_={'filename': stored.filename, 'path': stored.path, 'createdAt': now},
    )
    db.session.execute(stmt)
    db.session.commit()


def latest_upload(user_id, purpose):
    return UploadedImage.query.filter_by(user_id=user_id, purpose=purpose).first()


@images_bp.route('/upload/image', methods=['POST'])
@login_required
def upload_image():
    upload = request.files.get('image')
    if upload is None or not upload.filename:
        raise InvalidInput('No file provided')
    purpose = (request.form.get('type') or 'feed').strip() or 'feed'

    # every image type lands in the feed area; `type` only tags the record
    stored = get_file_store().save('feed', g.user.id, upload.read(), upload.mimetype, upload.filename)
    record_upload(g.user.id, purpose, stored)
    current_app.logger.info(f'Stored {purpose} image for user {g.user.id}: {stored.url}')
    return jsonify({'success': True, 'imageUrl': stored.url, 'filename': stored.filename})


@images_bp.route('/user/feed-image', methods=['GET'])
@login_required
def feed_image():
    record = latest_upload(g.user.id, 'feed')
    if record is None:
        raise NotFound('No feed image found for this user')
    return jsonify({'success': True, 'imageUrl': record.url})
