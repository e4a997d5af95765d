from flask import Blueprint, current_app, jsonify

session_api = Blueprint('session_api', __name__)


def _session():
    return current_app.extensions['trivia_session']


@session_api.route('/state', methods=['GET'])
def get_state():
    """
    Returns the same snapshot the session broadcasts as game:state.
    """
    return jsonify(_session().state())


@session_api.route('/players', methods=['GET'])
def get_players():
    return jsonify(_session().players())
