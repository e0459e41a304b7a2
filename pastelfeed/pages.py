import os

from flask import Blueprint, abort, current_app, redirect, render_template, send_from_directory, url_for

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/')
@pages_bp.route('/index.html')
def index():
    # login / registration
    return render_template('index.html')


@pages_bp.route('/feed')
def feed():
    return render_template('feed.html')


@pages_bp.route('/feed.html')
def feed_html():
    return redirect(url_for('pages.feed'))


@pages_bp.route('/letter')
def letter():
    return render_template('letter.html')


@pages_bp.route('/letter.html')
def letter_html():
    return redirect(url_for('pages.letter'))


@pages_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    root = current_app.config['UPLOAD_FOLDER']
    if not os.path.isfile(os.path.join(root, filename)):
        abort(404)
    response = send_from_directory(root, filename, max_age=0)
    response.headers['X-Content-Type-Options'] = 'nosniff'
    return response
