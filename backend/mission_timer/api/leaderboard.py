from flask import Blueprint, jsonify, request

from mission_timer.exceptions import NotFoundError, ValidationError
from mission_timer.services.leaderboard import (
    MISSING,
    delete_entry,
    insert_entry,
    list_entries,
    update_entry,
)

leaderboard = Blueprint('leaderboard', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@leaderboard.route('', methods=['GET'])
def get_leaderboard():
    return jsonify(list_entries())


@leaderboard.route('', methods=['POST'])
def create_entry():
    data = _json_body()
    try:
        entry = insert_entry(data.get('name'), data.get('timeMs'))
    except ValidationError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(entry), 201


@leaderboard.route('/<string:entry_id>', methods=['PUT'])
def edit_entry(entry_id):
    data = _json_body()
    try:
        entry = update_entry(
            entry_id,
            name=data['name'] if 'name' in data else MISSING,
            time_ms=data['timeMs'] if 'timeMs' in data else MISSING,
        )
    except NotFoundError as exc:
        return jsonify({'error': str(exc)}), 404
    except ValidationError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(entry)


@leaderboard.route('/<string:entry_id>', methods=['DELETE'])
def remove_entry(entry_id):
    try:
        removed = delete_entry(entry_id)
    except NotFoundError as exc:
        return jsonify({'error': str(exc)}), 404
    return jsonify(removed)
