from flask import Blueprint, current_app, jsonify
from numbergame import get_engine

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the number elimination game server!'})

@main.route('/health')
def health():
    engine = get_engine(current_app)
    return jsonify({'status': 'healthy', 'active_rooms': len(engine.registry)})
