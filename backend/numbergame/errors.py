"""Game rule violations raised by the engine.

Every error is recoverable: the transport reports it to the connection that
sent the command and the room carries on untouched.
"""


class NumberGameError(Exception):
    """Base class for all rejected commands."""
    error = 'game_error'
    default_message = 'Command rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.error, 'message': self.message}


# ---- Room admission ----

class RoomNotFound(NumberGameError):
    error = 'room_not_found'

    def __init__(self, room_code):
        self.room_code = room_code
        super().__init__(f"Room {room_code} not found")


class RoomNotJoinable(NumberGameError):
    """The room has left the lobby."""
    error = 'room_not_joinable'
    default_message = 'Game already in progress'


class RoomFull(NumberGameError):
    error = 'room_full'
    default_message = 'Room is full'


class PlayerNotFound(NumberGameError):
    error = 'player_not_found'
    default_message = 'Player not found in this room'


class AlreadySeated(NumberGameError):
    """A connection may hold one seat at a time."""
    error = 'already_seated'

    def __init__(self, room_code):
        self.room_code = room_code
        super().__init__(f"This connection is already seated in room {room_code}")


# ---- Start validation ----

class InsufficientPlayers(NumberGameError):
    error = 'insufficient_players'

    def __init__(self, minimum):
        self.minimum = minimum
        super().__init__(f"At least {minimum} players are required to start the game")


class NotAllReady(NumberGameError):
    error = 'not_all_ready'
    default_message = 'Not all players are ready'


class NotHost(NumberGameError):
    error = 'not_host'
    default_message = 'Only the host may start the game'


# ---- Turns ----

class NotYourTurn(NumberGameError):
    error = 'not_your_turn'
    default_message = 'Not your turn'


class AlreadyEliminated(NumberGameError):
    error = 'already_eliminated'
    default_message = 'You are eliminated'


class SelfTargetForbidden(NumberGameError):
    error = 'self_target_forbidden'
    default_message = 'You cannot select your own secret number!'


# ---- Input ----

class InvalidValue(NumberGameError):
    """A number, range or name that failed parsing or bounds checks."""
    error = 'invalid_value'
    default_message = 'Invalid value'
