import pytest

from pastelfeed.errors import InvalidInput, NotFound
from pastelfeed.models import SavedItem
from pastelfeed.saved_items_api import remove_item, save_item


def test_saved_item_round_trip(alice):
    payload = {
        'itemType': 'post',
        'itemId': 7,
        'title': 'Sunset',
        'description': 'Pink skies',
        'imageUrl': '/uploads/feed/1/sunset.jpg',
    }
    created = alice.post('/api/saved-items', json=payload).get_json()
    assert created['success'] is True

    items = alice.get('/api/saved-items').get_json()['items']
    assert len(items) == 1
    item = items[0]
    assert item['id'] == created['id']
    for key, value in payload.items():
        assert item[key] == value

    assert alice.delete(f"/api/saved-items/{created['id']}").get_json()['success'] is True
    assert alice.get('/api/saved-items').get_json()['items'] == []


def test_items_listed_newest_first(alice):
    for title in ('one', 'two', 'three'):
        alice.post('/api/saved-items', json={'itemType': 'note', 'title': title})
    titles = [i['title'] for i in alice.get('/api/saved-items').get_json()['items']]
    assert titles == ['three', 'two', 'one']


def test_item_type_required(alice):
    assert alice.post('/api/saved-items', json={'title': 'no type'}).status_code == 400
    assert alice.post('/api/saved-items', json={'itemType': ' '}).status_code == 400


def test_optional_fields_default_to_null(alice):
    alice.post('/api/saved-items', json={'itemType': 'link'})
    item = alice.get('/api/saved-items').get_json()['items'][0]
    assert item['itemId'] is None
    assert item['title'] is None
    assert item['imageUrl'] is None


def test_cannot_delete_someone_elses_item(app, alice, bob):
    item_id = alice.post('/api/saved-items', json={'itemType': 'post', 'title': 'mine'}).get_json()['id']

    resp = bob.delete(f'/api/saved-items/{item_id}')
    assert resp.status_code == 404
    assert 'error' in resp.get_json()
    assert [i['id'] for i in alice.get('/api/saved-items').get_json()['items']] == [item_id]
    assert bob.get('/api/saved-items').get_json()['items'] == []


def test_delete_unknown_item(alice):
    assert alice.delete('/api/saved-items/999').status_code == 404


def test_service_functions(app):
    with app.app_context():
        with pytest.raises(InvalidInput):
            save_item(1, '')
        item = save_item(1, 'post', title='t')
        with pytest.raises(NotFound):
            remove_item(2, item.id)
        remove_item(1, item.id)
        assert SavedItem.query.count() == 0
