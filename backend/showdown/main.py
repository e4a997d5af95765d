from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return current_app.send_static_file('index.html')


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
