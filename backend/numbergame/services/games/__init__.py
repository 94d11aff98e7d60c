"""Game domain services: rooms, turns and disconnect timers.

This package contains the pure game logic used by the socket handlers and
HTTP routes, keeping transport concerns separated from the game rules.
"""

from .engine import GameEngine
from .outcomes import CONTINUE, GAME_OVER, PLAYER_LEFT, ROOM_DELETED

__all__ = ['GameEngine', 'CONTINUE', 'GAME_OVER', 'PLAYER_LEFT', 'ROOM_DELETED']
