from flask import Blueprint, current_app, jsonify
from numbergame import get_engine
from numbergame.errors import RoomNotFound

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    """Public state of a room, as broadcast to its members."""
    engine = get_engine(current_app)
    try:
        room = engine.get_room(room_code)
    except RoomNotFound as exc:
        return jsonify(exc.to_dict()), 404
    payload = room.to_dict()
    payload['max_players'] = engine.registry.max_players
    return jsonify(payload)
