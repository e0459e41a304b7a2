import os

import pytest

from pastelfeed.errors import InvalidInput
from pastelfeed.storage import MB, LocalFileStore


@pytest.fixture
def store(app, tmp_path):
    with app.app_context():
        yield LocalFileStore(tmp_path / 'files')


def test_feed_images_go_to_owner_directory(store):
    stored = store.save('feed', 7, b'data', 'image/png', 'My Holiday.PNG')
    assert stored.path == f'feed/7/{stored.filename}'
    assert stored.url == f'/uploads/feed/7/{stored.filename}'
    assert stored.filename.startswith('feed-image-7-')
    assert stored.filename.endswith('.png')
    with open(os.path.join(store.root, 'feed', '7', stored.filename), 'rb') as fh:
        assert fh.read() == b'data'


def test_profile_photos_share_one_directory(store):
    stored = store.save('profile', 3, b'data', 'image/webp', 'face.webp')
    assert stored.path == f'profile_photos/{stored.filename}'
    assert stored.filename.startswith('profile-3-')


def test_filenames_do_not_collide(store):
    names = {store.save('feed', 1, b'x', 'image/jpeg', 'a.jpg').filename for _ in range(5)}
    assert len(names) == 5


def test_unsafe_filename_is_sanitised(store):
    stored = store.save('feed', 1, b'x', 'image/jpeg', '../../etc/passwd.jpg')
    assert stored.filename.endswith('.jpg')
    assert os.path.dirname(os.path.join(store.root, stored.path)) == os.path.join(store.root, 'feed', '1')


@pytest.mark.parametrize('purpose, data, mimetype', [
    ('profile', b'x' * (5 * MB + 1), 'image/jpeg'),
    ('feed', b'x' * (10 * MB + 1), 'image/jpeg'),
    ('profile', b'x', 'text/html'),
    ('feed', b'x', 'image/tiff'),
    ('profile', b'<svg onload="alert(1)"/>', 'image/svg+xml'),
    ('feed', b'<svg/>', 'IMAGE/SVG+XML'),
    ('feed', b'', 'image/png'),
    ('avatar', b'x', 'image/png'),
])
def test_rejected_uploads_write_nothing(store, purpose, data, mimetype):
    with pytest.raises(InvalidInput):
        store.save(purpose, 1, data, mimetype, 'file.png')
    assert not os.path.exists(store.root) or os.listdir(store.root) == []


def test_limits_are_inclusive(store):
    store.save('profile', 1, b'x' * (5 * MB), 'image/jpeg', 'big.jpg')


@pytest.mark.parametrize('original, ext', [
    ('фото.jpg', '.jpg'),
    ('写真.JPG', '.jpg'),
    ('noextension', ''),
])
def test_extension_survives_non_ascii_names(store, original, ext):
    stored = store.save('feed', 1, b'x', 'image/jpeg', original)
    assert os.path.splitext(stored.filename)[1] == ext
