import random
import secrets
import time
from typing import List, Optional

LOBBY = 'LOBBY'
PLAYING = 'PLAYING'
FINISHED = 'FINISHED'


def generate_room_code(length=4):
    """Generate a short numeric room code with no leading zero."""
    low = 10 ** (length - 1)
    return str(random.randint(low, 10 * low - 1))


def generate_reconnect_token():
    return secrets.token_urlsafe(16)


class Player:
    id: str
    name: str
    is_host: bool
    secret_number: Optional[int]
    is_ready: bool
    is_eliminated: bool
    reconnect_token: str

    def __init__(self, connection_id: str, name: str, is_host: bool = False):
        self.id = connection_id
        self.name = name
        self.is_host = is_host
        self.secret_number = None
        self.is_ready = False
        self.is_eliminated = False
        self.reconnect_token = generate_reconnect_token()

    def to_dict(self, private=False, reveal_secret=False):
        data = {
            'id': self.id,
            'name': self.name,
            'is_host': self.is_host,
            'is_ready': self.is_ready,
            'is_eliminated': self.is_eliminated,
        }
        if private or reveal_secret or self.is_eliminated:
            data['secret_number'] = self.secret_number
        if private:
            data['reconnect_token'] = self.reconnect_token
        return data

    def __repr__(self):
        return f"<Player {self.name!r} id={self.id}>"


class LogEntry:
    def __init__(self, player: str, number: int, eliminated: List[str], timestamp: Optional[float] = None):
        self.player = player
        self.number = number
        self.eliminated = eliminated
        self.timestamp = timestamp if timestamp is not None else time.time()

    def to_dict(self):
        return {
            'player': self.player,
            'number': self.number,
            'eliminated': list(self.eliminated),
            'timestamp': self.timestamp,
        }


class Room:
    room_code: str
    players: List[Player]
    game_state: str
    current_turn_index: int
    min_number: int
    max_number: int
    eliminated_players: List[Player]
    game_log: List[LogEntry]
    winner: Optional[Player]

    def __init__(self, room_code: str, min_number: int = 1, max_number: int = 100):
        self.room_code = room_code
        self.players = []
        self.game_state = LOBBY
        self.current_turn_index = 0
        self.min_number = min_number
        self.max_number = max_number
        self.eliminated_players = []
        self.game_log = []
        self.winner = None
        self.created_at = time.time()

    # ---- Lookups ----

    def get_player(self, connection_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == connection_id:
                return player
        return None

    def get_player_by_name(self, name: str) -> Optional[Player]:
        # Names are not unique; the earliest arrival wins
        for player in self.players:
            if player.name == name:
                return player
        return None

    def get_player_by_token(self, token: str) -> Optional[Player]:
        if not isinstance(token, str):
            return None
        candidate = token.encode('utf-8')
        for player in self.players:
            if secrets.compare_digest(player.reconnect_token.encode('utf-8'), candidate):
                return player
        return None

    @property
    def host(self) -> Optional[Player]:
        for player in self.players:
            if player.is_host:
                return player
        return None

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_turn_index < len(self.players):
            return self.players[self.current_turn_index]
        return None

    @property
    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_eliminated]

    def is_empty(self):
        return not self.players

    def contains(self, number: int) -> bool:
        return self.min_number <= number <= self.max_number

    # ---- Serialisation ----

    def players_to_dict(self):
        reveal = self.game_state == FINISHED
        return [p.to_dict(reveal_secret=reveal) for p in self.players]

    def to_dict(self):
        """Public view of the room, safe to broadcast to every member."""
        return {
            'room_code': self.room_code,
            'game_state': self.game_state,
            'players': self.players_to_dict(),
            'current_turn_index': self.current_turn_index,
            'min_number': self.min_number,
            'max_number': self.max_number,
            'eliminated_players': [p.to_dict() for p in self.eliminated_players],
            'game_log': [entry.to_dict() for entry in self.game_log],
            'winner': self.winner.to_dict(reveal_secret=True) if self.winner else None,
        }

    def __repr__(self):
        return f"<Room {self.room_code} {self.game_state} players={len(self.players)}>"
