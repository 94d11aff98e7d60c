"""Room registry: creation, admission, rejoin and removal of players."""

import logging
from typing import Callable, Dict, Iterator, Optional, Tuple

from numbergame.errors import AlreadySeated, PlayerNotFound, RoomFull, RoomNotFound, RoomNotJoinable
from numbergame.models import LOBBY, Player, Room, generate_room_code
from .outcomes import PLAYER_LEFT, ROOM_DELETED, RemovalOutcome
from .turns import handle_departure

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Active rooms keyed by room code.

    Not thread safe on its own; ``GameEngine`` serialises access.
    """

    def __init__(self, max_players: int = 20, code_length: int = 4,
                 code_generator: Optional[Callable[[], str]] = None):
        self.max_players = max_players
        self.code_length = code_length
        self._code_generator = code_generator or (lambda: generate_room_code(code_length))
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_code):
        return room_code in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def get(self, room_code: str) -> Optional[Room]:
        return self._rooms.get(room_code)

    def get_or_raise(self, room_code: str) -> Room:
        room = self._rooms.get(room_code)
        if room is None:
            raise RoomNotFound(room_code)
        return room

    def _fresh_code(self) -> str:
        code = self._code_generator()
        while code in self._rooms:
            logger.warning(f"[room-code] collision on {code}, regenerating")
            code = self._code_generator()
        return code

    def create_room(self, host_name: str, connection_id: str,
                    min_number: int, max_number: int) -> Tuple[Room, Player]:
        self.ensure_unseated(connection_id)
        room = Room(self._fresh_code(), min_number=min_number, max_number=max_number)
        host = Player(connection_id, host_name, is_host=True)
        room.players.append(host)
        self._rooms[room.room_code] = room
        logger.info(
            f"[room-create] room={room.room_code} host={host_name} range={min_number}-{max_number}"
        )
        return room, host

    def join_room(self, room_code: str, player_name: str, connection_id: str) -> Tuple[Room, Player]:
        room = self.get_or_raise(room_code)
        if room.game_state != LOBBY:
            raise RoomNotJoinable()
        if len(room.players) >= self.max_players:
            raise RoomFull()
        self.ensure_unseated(connection_id)

        player = Player(connection_id, player_name)
        room.players.append(player)
        logger.info(f"[room-join] room={room_code} player={player_name} count={len(room.players)}")
        return room, player

    def find_player_for_rejoin(self, room_code: str, player_name: str,
                               reconnect_token: Optional[str] = None) -> Tuple[Room, Player]:
        room = self.get_or_raise(room_code)
        if reconnect_token:
            player = room.get_player_by_token(reconnect_token)
        else:
            player = room.get_player_by_name(player_name)
        if player is None:
            raise PlayerNotFound()
        return room, player

    def ensure_unseated(self, connection_id: str, allow: Optional[Player] = None) -> None:
        """Refuse a second seat for a connection that already holds one."""
        room, player = self.find_by_connection(connection_id)
        if player is not None and player is not allow:
            raise AlreadySeated(room.room_code)

    def find_by_connection(self, connection_id: str) -> Tuple[Optional[Room], Optional[Player]]:
        for room in self._rooms.values():
            player = room.get_player(connection_id)
            if player is not None:
                return room, player
        return None, None

    def remove_player(self, connection_id: str) -> Optional[RemovalOutcome]:
        room, player = self.find_by_connection(connection_id)
        if room is None:
            return None

        index = room.players.index(player)
        del room.players[index]

        if room.is_empty():
            del self._rooms[room.room_code]
            logger.info(f"[room-delete] room={room.room_code} last player {player.name} left")
            return RemovalOutcome(ROOM_DELETED, room.room_code, player)

        if player.is_host:
            room.players[0].is_host = True

        game_over = handle_departure(room, index)
        logger.info(
            f"[room-leave] room={room.room_code} player={player.name} "
            f"remaining={len(room.players)} host={room.players[0].name}"
        )
        return RemovalOutcome(PLAYER_LEFT, room.room_code, player, room=room, game_over=game_over)
