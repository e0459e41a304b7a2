"""
Local file store for user uploads.

Files live under a single upload root (``UPLOAD_FOLDER``). Each purpose
has its own directory, size limit and accepted MIME types. ``save``
returns the public URL, rooted at ``/uploads/``, that the app serves the
file back from.
"""
import os
import secrets
import time
from collections import namedtuple

from flask import current_app
from werkzeug.utils import secure_filename

from .errors import Internal, InvalidInput

MB = 1024 * 1024
PUBLIC_PREFIX = '/uploads/'

FEED_IMAGE_TYPES = frozenset({'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'})
# image types that can carry script when served back inline
BLOCKED_TYPES = frozenset({'image/svg+xml'})

# allowed_types of None accepts any image/* type
UploadPolicy = namedtuple('UploadPolicy', 'directory per_owner max_bytes allowed_types prefix')

POLICIES = {
    'profile': UploadPolicy('profile_photos', False, 5 * MB, None, 'profile'),
    'feed': UploadPolicy('feed', True, 10 * MB, FEED_IMAGE_TYPES, 'feed-image'),
}

StoredFile = namedtuple('StoredFile', 'filename path url')


class LocalFileStore:
    def __init__(self, root):
        self.root = os.path.abspath(root)

    def policy(self, purpose):
        try:
            return POLICIES[purpose]
        except KeyError:
            raise InvalidInput(f'Unknown upload purpose: {purpose}') from None

    def check(self, purpose, data, mimetype):
        """Reject a payload before anything touches the disk or the database."""
        policy = self.policy(purpose)
        mimetype = (mimetype or '').lower()
        if mimetype in BLOCKED_TYPES:
            raise InvalidInput('SVG images are not allowed')
        if policy.allowed_types is None:
            if not mimetype.startswith('image/'):
                raise InvalidInput('Only image uploads are allowed')
        elif mimetype not in policy.allowed_types:
            raise InvalidInput('File type not allowed. Only JPG, PNG, GIF and WebP are accepted.')
        if not data:
            raise InvalidInput('No file provided')
        if len(data) > policy.max_bytes:
            raise InvalidInput(f'File is too large. Maximum size: {policy.max_bytes // MB}MB')
        return policy

    def _filename(self, policy, owner_id, original_filename):
        # the stem may be non-ASCII and sanitise to nothing, so clean the extension alone
        ext = secure_filename(os.path.splitext(original_filename or '')[1])
        ext = f'.{ext.lower()}' if ext else ''
        millis = int(time.time() * 1000)
        return f'{policy.prefix}-{owner_id}-{millis}-{secrets.token_hex(4)}{ext}'

    def save(self, purpose, owner_id, data, mimetype, original_filename):
        policy = self.check(purpose, data, mimetype)

        parts = [policy.directory]
        if policy.per_owner:
            parts.append(str(owner_id))
        directory = os.path.join(self.root, *parts)
        os.makedirs(directory, exist_ok=True)

        filename = self._filename(policy, owner_id, original_filename)
        full_path = os.path.join(directory, filename)
        try:
            with open(full_path, 'wb') as fh:
                fh.write(data)
        except OSError as exc:
            current_app.logger.exception(f'Failed to write upload {full_path}')
            raise Internal('Failed to store the image on the server') from exc

        if not os.path.exists(full_path):
            raise Internal('Failed to store the image on the server')

        relative = '/'.join(parts + [filename])
        current_app.logger.debug(f'Stored {purpose} upload for user {owner_id} at {full_path}')
        return StoredFile(filename, relative, PUBLIC_PREFIX + relative)


def get_file_store():
    return current_app.extensions['pastelfeed.files']
