from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect, text

db = SQLAlchemy()


def utcnow():
    # SQLite drops tzinfo, so keep everything naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column('password', db.String(255), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    google_id = db.Column('googleId', db.String(120), unique=True)
    facebook_id = db.Column('facebookId', db.String(120), unique=True)
    display_name = db.Column('displayName', db.String(120))
    photo_url = db.Column('photoUrl', db.String(255))

    def to_dict(self):
        """Public view of the account; the password hash never leaves the server."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'googleId': self.google_id,
            'facebookId': self.facebook_id,
            'displayName': self.display_name,
            'photoUrl': self.photo_url,
        }

    def __repr__(self):
        return f'<User {self.username}>'


class AuthSession(db.Model):
    __tablename__ = 'sessions'

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column('userId', db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column('createdAt', db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column('expiresAt', db.DateTime, nullable=False)

    def __repr__(self):
        return f'<AuthSession user={self.user_id} expires={self.expires_at}>'


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column('userId', db.Integer, db.ForeignKey('users.id'), nullable=True)
    body = db.Column('message', db.Text, nullable=False)
    created_at = db.Column('createdAt', db.DateTime, nullable=False, default=utcnow)

    author = db.relationship('User', lazy='joined')


class SavedItem(db.Model):
    __tablename__ = 'saved_items'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column('userId', db.Integer, db.ForeignKey('users.id'), nullable=False)
    item_type = db.Column('itemType', db.String(50), nullable=False)
    item_id = db.Column('itemId', db.Integer)
    title = db.Column(db.String(255))
    description = db.Column(db.Text)
    image_url = db.Column('imageUrl', db.String(255))
    created_at = db.Column('createdAt', db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'itemType': self.item_type,
            'itemId': self.item_id,
            'title': self.title,
            'description': self.description,
            'imageUrl': self.image_url,
            'createdAt': isoformat(self.created_at),
        }


class Letter(db.Model):
    __tablename__ = 'letters'

    id = db.Column(db.Integer, primary_key=True)
    # unique so the save path can upsert on it
    user_id = db.Column('userId', db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    title = db.Column(db.String(255))
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column('createdAt', db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column('updatedAt', db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'content': self.content,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class UploadedImage(db.Model):
    __tablename__ = 'uploaded_images'
    __table_args__ = (db.UniqueConstraint('userId', 'purpose'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column('userId', db.Integer, db.ForeignKey('users.id'), nullable=False)
    purpose = db.Column(db.String(50), nullable=False)
    filename = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(512), nullable=False)
    created_at = db.Column('createdAt', db.DateTime, nullable=False, default=utcnow)

    @property
    def url(self):
        return '/uploads/' + self.path


# Columns that older databases may lack; added in place at startup.
USER_COLUMN_PATCHES = {
    'displayName': 'TEXT',
    'photoUrl': 'TEXT',
    'googleId': 'TEXT',
    'facebookId': 'TEXT',
}


def init_db():
    """
    Create missing tables, then add any user columns an older database
    is missing. Must run inside an app context, once, before serving.
    Returns the list of columns that were added.
    """
    db.create_all()

    existing = {col['name'] for col in inspect(db.engine).get_columns('users')}
    added = []
    with db.engine.begin() as conn:
        for name, ddl_type in USER_COLUMN_PATCHES.items():
            if name not in existing:
                conn.execute(text(f'ALTER TABLE users ADD COLUMN {name} {ddl_type}'))
                added.append(name)
    return added
