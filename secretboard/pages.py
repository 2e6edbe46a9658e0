from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from .models import db, User

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/')
def home():
    return render_template('home.html')


@pages_bp.route('/secrets')
def secrets():
    # only the text goes to the template; nothing that identifies the author
    try:
        posted = [u.secret for u in User.with_secrets()]
    except SQLAlchemyError:
        current_app.logger.exception('Failed to load secrets')
        posted = []
    return render_template('secrets.html', secrets=posted)


@pages_bp.route('/submit', methods=['GET', 'POST'])
@login_required
def submit():
    if request.method == 'GET':
        return render_template('submit.html')
    submitted = request.form.get('secret')
    try:
        current_user.secret = submitted
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Failed to save secret for user id=%s', current_user.id)
        flash('Could not save your secret. Try again.', 'error')
        return redirect(url_for('pages.submit'))
    current_app.logger.info('Secret updated for user id=%s', current_user.id)
    return redirect(url_for('pages.secrets'))
