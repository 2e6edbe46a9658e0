from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from secretboard.models import db, User, PROVIDER_GOOGLE


def test_password_is_hashed_and_checked(app) -> None:
    with app.app_context():
        u = User(username='bob@example.com', email='bob@example.com')
        u.set_password('s3cret')
        assert u.password_hash and u.password_hash != 's3cret'
        assert u.check_password('s3cret') is True
        assert u.check_password('wrong') is False


def test_oauth_user_has_no_local_credential(app) -> None:
    with app.app_context():
        u = User(google_id='g-1', provider=PROVIDER_GOOGLE)
        assert u.check_password('') is False
        assert u.check_password('anything') is False


def test_email_unique_only_when_present(app) -> None:
    with app.app_context():
        db.session.add_all([
            User(facebook_id='fb-1', provider='facebook'),
            User(facebook_id='fb-2', provider='facebook'),
        ])
        db.session.commit()
        assert User.query.filter(User.email.is_(None)).count() == 2

        db.session.add(User(username='a@example.com', email='a@example.com'))
        db.session.commit()
        db.session.add(User(username='a@example.com', email='a@example.com'))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()


def test_with_secrets_skips_users_without_one(app) -> None:
    with app.app_context():
        db.session.add_all([
            User(username='one@example.com', email='one@example.com', secret='I like pineapple pizza'),
            User(username='two@example.com', email='two@example.com'),
            User(username='three@example.com', email='three@example.com', secret='I never learned to swim'),
        ])
        db.session.commit()
        found = [u.secret for u in User.with_secrets()]
        assert found == ['I like pineapple pizza', 'I never learned to swim']
