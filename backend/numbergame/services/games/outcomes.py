"""Results handed back to the transport after a state change."""

from typing import List, Optional

from numbergame.models import Player, Room

CONTINUE = 'CONTINUE'
GAME_OVER = 'GAME_OVER'
PLAYER_LEFT = 'PLAYER_LEFT'
ROOM_DELETED = 'ROOM_DELETED'


class EliminationOutcome:
    def __init__(self, action: str, room: Room, number: int, eliminated: List[Player]):
        self.action = action
        self.room = room
        self.number = number
        self.eliminated = eliminated

    @property
    def is_game_over(self):
        return self.action == GAME_OVER

    @property
    def game_log(self):
        return self.room.game_log

    def to_dict(self):
        return {
            'number': self.number,
            'eliminated_players': [p.to_dict() for p in self.eliminated],
            'current_turn_index': self.room.current_turn_index,
            'game_log': [entry.to_dict() for entry in self.room.game_log],
        }


class RemovalOutcome:
    """A player left their room, either explicitly or after the grace period.

    ``room`` is None when the departure emptied and deleted the room.
    ``game_over`` is set when the departure left at most one active player
    in a running game.
    """

    def __init__(self, action: str, room_code: str, player: Player,
                 room: Optional[Room] = None, game_over: bool = False):
        self.action = action
        self.room_code = room_code
        self.player = player
        self.room = room
        self.game_over = game_over

    @property
    def winner(self) -> Optional[Player]:
        return self.room.winner if self.room else None
