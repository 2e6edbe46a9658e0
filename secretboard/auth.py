from urllib.parse import urlparse

from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash, session
from flask_login import LoginManager, login_user, logout_user
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .models import db, User, PROVIDER_LOCAL

auth_bp = Blueprint('auth', __name__)

login_manager = LoginManager()
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to share a secret.'


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def init_app(app):
    """
    Attach the login manager to the app. Call from create_app():
        from .auth import init_app as init_auth
        init_auth(app)
    """
    login_manager.init_app(app)


def _normalize_username(raw):
    return (raw or '').strip().lower()


def _safe_next(target):
    # only same-site relative paths; anything with a scheme or host is dropped
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/') or target.startswith('//'):
        return None
    return target


def start_session(user):
    session.permanent = True
    login_user(user)


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'GET':
        return render_template('register.html')
    username = _normalize_username(request.form.get('username'))
    password = request.form.get('password') or ''
    if not username or not password:
        flash('Email and password are both required.', 'error')
        return redirect(url_for('auth.register'))

    if User.query.filter_by(email=username).first():
        current_app.logger.info('Registration rejected: email already in use')
        flash('That email is already registered.', 'error')
        return redirect(url_for('auth.register'))

    user = User(username=username, email=username, provider=PROVIDER_LOCAL)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.exception('Registration failed on unique constraint')
        flash('That email is already registered.', 'error')
        return redirect(url_for('auth.register'))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Registration failed')
        flash('Could not register right now. Try again.', 'error')
        return redirect(url_for('auth.register'))

    current_app.logger.info('Registered local user id=%s', user.id)
    start_session(user)
    return redirect(url_for('pages.secrets'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return render_template('login.html', next=request.args.get('next', ''))
    username = _normalize_username(request.form.get('username'))
    password = request.form.get('password') or ''
    target = _safe_next(request.form.get('next') or request.args.get('next'))
    user = None
    if username and password:
        user = User.query.filter_by(username=username, provider=PROVIDER_LOCAL).first()
    if user is None or not user.check_password(password):
        current_app.logger.info('Failed local login attempt')
        flash('Invalid username or password.', 'error')
        return redirect(url_for('auth.login', next=target))

    start_session(user)
    return redirect(target or url_for('pages.secrets'))


@auth_bp.route('/logout')
def logout():
    logout_user()
    session.clear()
    return redirect(url_for('pages.home'))
