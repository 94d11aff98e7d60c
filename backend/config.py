import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Seconds a dropped connection keeps its seat before removal
    DISCONNECT_GRACE_SEC = float(os.environ.get('DISCONNECT_GRACE_SEC', '10'))
    # Room admission limits
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '20'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Fallback number range when a room is created without one (inclusive)
    DEFAULT_MIN_NUMBER = int(os.environ.get('DEFAULT_MIN_NUMBER', '1'))
    DEFAULT_MAX_NUMBER = int(os.environ.get('DEFAULT_MAX_NUMBER', '100'))
    # Digits in a room code
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Comma separated list of origins allowed to open a socket
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',')
        if origin.strip()
    ]
