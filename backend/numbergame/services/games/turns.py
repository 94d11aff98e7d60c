"""Readiness, game start and the turn/elimination state machine.

Rooms move LOBBY -> PLAYING -> FINISHED and never go back. These functions
mutate a single ``Room`` and raise ``NumberGameError`` subclasses when a
command breaks the rules; a rejected command leaves the room untouched.
"""

import logging
from typing import List, Optional

from numbergame.errors import (
    AlreadyEliminated,
    InsufficientPlayers,
    InvalidValue,
    NotAllReady,
    NotHost,
    NotYourTurn,
    RoomNotJoinable,
    SelfTargetForbidden,
)
from numbergame.models import FINISHED, LOBBY, PLAYING, LogEntry, Player, Room
from .outcomes import CONTINUE, GAME_OVER, EliminationOutcome

logger = logging.getLogger(__name__)


def _check_in_range(room: Room, number: int, field: str) -> None:
    if not room.contains(number):
        raise InvalidValue(
            f"{field} must be between {room.min_number} and {room.max_number}"
        )


def set_ready(room: Room, connection_id: str, secret_number: int) -> Optional[Player]:
    """Commit a player's secret and mark them ready.

    Returns None without touching the room when the connection is not seated
    here or the game has already left the lobby.
    """
    player = room.get_player(connection_id)
    if player is None:
        return None
    if room.game_state != LOBBY:
        logger.warning(
            f"[ready-ignored] room={room.room_code} player={player.name} state={room.game_state}"
        )
        return None
    _check_in_range(room, secret_number, 'secret_number')

    player.secret_number = secret_number
    player.is_ready = True
    logger.info(f"[ready] room={room.room_code} player={player.name}")
    return player


def start_game(room: Room, connection_id: Optional[str] = None, min_players: int = 2) -> Room:
    if room.game_state != LOBBY:
        raise RoomNotJoinable('Game is not in lobby')
    if connection_id is not None:
        host = room.host
        if host is None or host.id != connection_id:
            raise NotHost()
    if len(room.players) < min_players:
        raise InsufficientPlayers(min_players)
    if not all(p.is_ready for p in room.players):
        raise NotAllReady()

    room.game_state = PLAYING
    room.current_turn_index = 0
    room.game_log = []
    logger.info(
        f"[game-start] room={room.room_code} players={len(room.players)} first={room.players[0].name}"
    )
    return room


def advance_turn(room: Room) -> int:
    """Move the turn to the next non-eliminated player, wrapping around.

    If everyone is eliminated the index is left wherever the scan stopped.
    """
    count = len(room.players)
    if count == 0:
        return room.current_turn_index
    next_index = (room.current_turn_index + 1) % count
    attempts = 0
    while room.players[next_index].is_eliminated and attempts < count:
        next_index = (next_index + 1) % count
        attempts += 1
    room.current_turn_index = next_index
    return next_index


def _finish(room: Room, active: List[Player]) -> None:
    room.game_state = FINISHED
    room.winner = active[0] if len(active) == 1 else None
    logger.info(
        f"[game-over] room={room.room_code} winner={room.winner.name if room.winner else None}"
    )


def eliminate_called_value(room: Room, number: int, connection_id: str) -> Optional[EliminationOutcome]:
    if room.game_state != PLAYING:
        return None

    current = room.current_player
    if current is None or current.id != connection_id:
        raise NotYourTurn()
    if current.is_eliminated:
        advance_turn(room)
        raise AlreadyEliminated()
    _check_in_range(room, number, 'number')
    if current.secret_number == number:
        raise SelfTargetForbidden()

    eliminated = []
    for player in room.players:
        if not player.is_eliminated and player.secret_number == number:
            player.is_eliminated = True
            room.eliminated_players.append(player)
            eliminated.append(player)

    room.game_log.append(LogEntry(current.name, number, [p.name for p in eliminated]))
    logger.info(
        f"[eliminate] room={room.room_code} caller={current.name} number={number} "
        f"eliminated={[p.name for p in eliminated]}"
    )

    active = room.active_players
    if len(active) <= 1:
        _finish(room, active)
        return EliminationOutcome(GAME_OVER, room, number, eliminated)

    advance_turn(room)
    return EliminationOutcome(CONTINUE, room, number, eliminated)


def handle_departure(room: Room, removed_index: int) -> bool:
    """Repair turn order after ``players[removed_index]`` was removed.

    Only matters while PLAYING. Returns True when the departure ended the
    game.
    """
    if room.game_state != PLAYING or not room.players:
        return False

    if removed_index < room.current_turn_index:
        room.current_turn_index -= 1
    elif removed_index == room.current_turn_index:
        # The next seat now sits at removed_index; advance from the one before it
        room.current_turn_index = (removed_index - 1) % len(room.players)
        advance_turn(room)

    active = room.active_players
    if len(active) <= 1:
        _finish(room, active)
        return True
    return False
