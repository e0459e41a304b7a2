from flask import Blueprint, current_app, g, jsonify

from .auth import login_required
from .errors import InvalidInput
from .models import Message, db, isoformat
from .schemas import MessageRequest, parse_body

messages_bp = Blueprint('messages_api', __name__, url_prefix='/api/messages')


def post_message(user_id, body):
    if not isinstance(body, str) or not body.strip():
        raise InvalidInput('Invalid message')
    msg = Message(user_id=user_id, body=body)
    db.session.add(msg)
    db.session.commit()
    return msg


def row_to_message(msg):
    author = msg.author
    return {
        'id': msg.id,
        'userId': msg.user_id,
        'message': msg.body,
        'createdAt': isoformat(msg.created_at),
        'displayName': (author.display_name if author and author.display_name else f'User {msg.user_id}'),
    }


def recent_messages(limit=None):
    """Newest messages first, capped at MESSAGE_LIMIT."""
    if limit is None:
        limit = current_app.config['MESSAGE_LIMIT']
    rows = (Message.query
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .all())
    return [row_to_message(m) for m in rows]


@messages_bp.route('', methods=['GET'])
@login_required
def list_messages():
    return jsonify(recent_messages())


@messages_bp.route('', methods=['POST'])
@login_required
def send_message():
    body = parse_body(MessageRequest)
    msg = post_message(g.user.id, body.message)
    return jsonify({'success': True, 'id': msg.id, 'message': 'Message sent'})
