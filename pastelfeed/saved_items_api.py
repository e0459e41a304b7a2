from flask import Blueprint, g, jsonify

from .auth import login_required
from .errors import InvalidInput, NotFound
from .models import SavedItem, db
from .schemas import SavedItemRequest, parse_body

saved_items_bp = Blueprint('saved_items_api', __name__, url_prefix='/api/saved-items')


def save_item(user_id, item_type, item_id=None, title=None, description=None, image_url=None):
    if not item_type or not str(item_type).strip():
        raise InvalidInput('Item type is required')
    item = SavedItem(
        user_id=user_id,
        item_type=item_type,
        item_id=item_id,
        title=title or None,
        description=description or None,
        image_url=image_url or None,
    )
    db.session.add(item)
    db.session.commit()
    return item


def list_items(user_id):
    return (SavedItem.query
            .filter_by(user_id=user_id)
            .order_by(SavedItem.created_at.desc(), SavedItem.id.desc())
            .all())


def remove_item(user_id, item_id):
    # owner is part of the filter, so nobody can delete someone else's item
    removed = SavedItem.query.filter_by(id=item_id, user_id=user_id).delete()
    db.session.commit()
    if not removed:
        raise NotFound('Item not found or not owned by the user')


@saved_items_bp.route('', methods=['GET'])
@login_required
def get_saved_items():
    return jsonify({'success': True, 'items': [i.to_dict() for i in list_items(g.user.id)]})


@saved_items_bp.route('', methods=['POST'])
@login_required
def create_saved_item():
    body = parse_body(SavedItemRequest)
    item = save_item(g.user.id, body.item_type, body.item_id, body.title, body.description, body.image_url)
    return jsonify({'success': True, 'id': item.id, 'message': 'Item saved'})


@saved_items_bp.route('/<int:item_id>', methods=['DELETE'])
@login_required
def delete_saved_item(item_id):
    remove_item(g.user.id, item_id)
    return jsonify({'success': True, 'message': 'Item removed'})
