from flask import Blueprint, jsonify

from mission_timer.socketio_events import connections

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the mission timer server!', 'clients': len(connections)})
