from datetime import datetime

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()

PROVIDER_LOCAL = 'local'
PROVIDER_GOOGLE = 'google'
PROVIDER_FACEBOOK = 'facebook'


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), index=True)
    name = db.Column(db.String(255))
    # NULLs don't collide under UNIQUE, so OAuth accounts without an email are fine
    email = db.Column(db.String(255), unique=True, nullable=True)
    password_hash = db.Column(db.String(255))
    google_id = db.Column(db.String(255), unique=True, nullable=True)
    facebook_id = db.Column(db.String(255), unique=True, nullable=True)
    provider = db.Column(db.String(32), nullable=False, default=PROVIDER_LOCAL)
    secret = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @classmethod
    def with_secrets(cls):
        """Users that have posted a secret, oldest account first."""
        return cls.query.filter(cls.secret.isnot(None)).order_by(cls.id)

    def __repr__(self):
        return f'<User id={self.id} provider={self.provider!r}>'
