from flask import Blueprint, current_app, g, jsonify
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .auth import login_required
from .errors import InvalidInput
from .models import Letter, db, utcnow
from .schemas import LetterSaveRequest, parse_body

letter_bp = Blueprint('letter_api', __name__, url_prefix='/api/letter')

DEFAULT_TITLE = 'Untitled'


def get_letter(user_id):
    """The user's letter, or None if they never saved one."""
    return Letter.query.filter_by(user_id=user_id).first()


def save_letter(user_id, content, title=None):
    """
    Create the user's letter or overwrite it in place. A single
    INSERT ... ON CONFLICT keeps two concurrent saves from creating two rows.
    """
    if not isinstance(content, str) or not content.strip():
        raise InvalidInput('Letter content must not be empty')
    title = title or DEFAULT_TITLE
    now = utcnow()

    table = Letter.__table__
    stmt = sqlite_insert(table).values(
        userId=user_id, title=title, content=content, createdAt=now, updatedAt=now,
    ).on_conflict_do_update(
        index_elements=[table.c.userId],
        set_={'title': title, 'content': content, 'updatedAt': now},
    )
    db.session.execute(stmt)
    db.session.commit()

    letter = get_letter(user_id)
    current_app.logger.info(f'Letter {letter.id} saved for user {user_id}')
    return letter


@letter_bp.route('', methods=['GET'])
@login_required
def fetch_letter():
    letter = get_letter(g.user.id)
    return jsonify({'success': True, 'letter': letter.to_dict() if letter else None})


@letter_bp.route('/save', methods=['POST'])
@login_required
def store_letter():
    body = parse_body(LetterSaveRequest)
    letter = save_letter(g.user.id, body.content, body.title)
    return jsonify({'success': True, 'id': letter.id, 'message': 'Letter saved'})


@letter_bp.route('/user', methods=['GET'])
@login_required
def letter_user():
    user = g.user
    return jsonify({
        'success': True,
        'user': {
            'id': user.id,
            'username': user.username,
            'displayName': user.display_name or user.username,
            'photoUrl': user.photo_url,
        },
    })
