"""GameEngine: the single entry point the transport talks to.

Wraps the room registry, the turn rules and the disconnect scheduler behind
one re-entrant lock, so socket handlers on different threads and expiring
timers never interleave on the same state. The engine performs no I/O;
removals triggered by timers are handed to subscribed listeners.
"""

import logging
import threading
from typing import Any, Callable, List, Optional, Tuple

from numbergame.models import Player, Room
from . import turns
from .outcomes import EliminationOutcome, RemovalOutcome
from .rooms import RoomRegistry
from .scheduler import DisconnectScheduler
from .validation import parse_name, parse_number, parse_range

logger = logging.getLogger(__name__)

RemovalListener = Callable[[RemovalOutcome], None]


class GameEngine:
    def __init__(self, max_players: int = 20, min_players: int = 2,
                 default_min_number: int = 1, default_max_number: int = 100,
                 code_length: int = 4, grace_period: float = 10.0,
                 code_generator: Optional[Callable[[], str]] = None,
                 start_background_task: Optional[Callable] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.min_players = min_players
        self.default_min_number = default_min_number
        self.default_max_number = default_max_number
        self.registry = RoomRegistry(
            max_players=max_players, code_length=code_length, code_generator=code_generator
        )
        self.scheduler = DisconnectScheduler(
            self._expire_connection,
            grace_period=grace_period,
            start_background_task=start_background_task,
            sleep=sleep,
        )
        self._listeners: List[RemovalListener] = []
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config, **kwargs) -> 'GameEngine':
        """Build an engine from a Flask config mapping."""
        return cls(
            max_players=int(config.get('MAX_PLAYERS', 20)),
            min_players=int(config.get('MIN_PLAYERS', 2)),
            default_min_number=int(config.get('DEFAULT_MIN_NUMBER', 1)),
            default_max_number=int(config.get('DEFAULT_MAX_NUMBER', 100)),
            code_length=int(config.get('ROOM_CODE_LENGTH', 4)),
            grace_period=float(config.get('DISCONNECT_GRACE_SEC', 10)),
            **kwargs,
        )

    def subscribe(self, listener: RemovalListener) -> None:
        """Register a callback for removals that happen off the command path."""
        self._listeners.append(listener)

    # ---- Lookups ----

    def get_room(self, room_code: str) -> Room:
        with self._lock:
            return self.registry.get_or_raise(room_code)

    def find_room_by_connection(self, connection_id: str) -> Optional[Room]:
        with self._lock:
            room, _ = self.registry.find_by_connection(connection_id)
            return room

    # ---- Room lifecycle & admission ----

    def create_room(self, host_name: Any, connection_id: str,
                    number_range: Any = None) -> Tuple[Room, Player]:
        name = parse_name(host_name)
        low, high = parse_range(number_range, self.default_min_number, self.default_max_number)
        with self._lock:
            return self.registry.create_room(name, connection_id, low, high)

    def join_room(self, room_code: str, player_name: Any, connection_id: str) -> Tuple[Room, Player]:
        name = parse_name(player_name)
        with self._lock:
            return self.registry.join_room(room_code, name, connection_id)

    def rejoin_room(self, room_code: str, player_name: Any, connection_id: str,
                    reconnect_token: Optional[str] = None) -> Tuple[Room, Player]:
        if not reconnect_token:
            player_name = parse_name(player_name)
        with self._lock:
            room, player = self.registry.find_player_for_rejoin(
                room_code, player_name, reconnect_token
            )
            self.registry.ensure_unseated(connection_id, allow=player)
            if self.scheduler.cancel(player.id):
                logger.info(f"[rejoin] room={room_code} player={player.name} cancelled pending removal")
            old_id = player.id
            player.id = connection_id
            logger.info(f"[rejoin] room={room_code} player={player.name} conn={old_id} -> {connection_id}")
            return room, player

    def remove_player(self, connection_id: str) -> Optional[RemovalOutcome]:
        with self._lock:
            return self.registry.remove_player(connection_id)

    def leave_room(self, connection_id: str) -> Optional[RemovalOutcome]:
        """Explicit quit: remove now and drop any pending grace timer."""
        with self._lock:
            self.scheduler.cancel(connection_id)
            return self.registry.remove_player(connection_id)

    # ---- Readiness & start ----

    def set_ready(self, room_code: str, connection_id: str, secret_value: Any) -> Optional[Room]:
        secret = parse_number(secret_value, 'secret_number')
        with self._lock:
            room = self.registry.get(room_code)
            if room is None:
                return None
            if turns.set_ready(room, connection_id, secret) is None:
                return None
            return room

    def start_game(self, room_code: str, connection_id: Optional[str] = None) -> Room:
        with self._lock:
            room = self.registry.get_or_raise(room_code)
            return turns.start_game(room, connection_id, min_players=self.min_players)

    # ---- Turns ----

    def eliminate_called_value(self, room_code: str, value: Any,
                               connection_id: str) -> Optional[EliminationOutcome]:
        number = parse_number(value)
        with self._lock:
            room = self.registry.get(room_code)
            if room is None:
                return None
            return turns.eliminate_called_value(room, number, connection_id)

    # ---- Disconnect grace ----

    def schedule_removal(self, connection_id: str, grace_period: Optional[float] = None) -> float:
        return self.scheduler.schedule(connection_id, grace_period)

    def cancel_removal(self, connection_id: str) -> bool:
        return self.scheduler.cancel(connection_id)

    def is_removal_pending(self, connection_id: str) -> bool:
        return self.scheduler.is_pending(connection_id)

    def _expire_connection(self, connection_id: str) -> None:
        outcome = self.remove_player(connection_id)
        if outcome is None:
            logger.info(f"[timer-fire] conn={connection_id} no seat to release")
            return
        for listener in list(self._listeners):
            try:
                listener(outcome)
            except Exception:
                logger.exception(f"[timer-fire] listener failed for room={outcome.room_code}")
