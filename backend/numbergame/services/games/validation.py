"""Parsing of raw client input into typed values.

Commands carry JSON from the socket, so numbers may arrive as ints, floats or
strings. Anything that is not an exact integer is rejected here and never
reaches the room state.
"""

from typing import Any, Optional, Tuple

from numbergame.errors import InvalidValue

MAX_NAME_LENGTH = 32


def parse_number(raw: Any, field: str = 'number') -> int:
    if isinstance(raw, bool):
        raise InvalidValue(f"{field} must be an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw.is_integer():
            return int(raw)
        raise InvalidValue(f"{field} must be an integer")
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
    raise InvalidValue(f"{field} must be an integer")


def parse_range(raw: Any, default_min: int, default_max: int) -> Tuple[int, int]:
    """Turn an optional ``{'min': .., 'max': ..}`` mapping into bounds."""
    if raw is None:
        low, high = default_min, default_max
    elif isinstance(raw, dict):
        low = parse_number(raw.get('min', default_min), 'range.min')
        high = parse_number(raw.get('max', default_max), 'range.max')
    else:
        raise InvalidValue('range must be an object with min and max')
    if low >= high:
        raise InvalidValue(f"range.min ({low}) must be lower than range.max ({high})")
    return low, high


def parse_name(raw: Optional[Any]) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidValue('player_name is required')
    name = raw.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidValue(f"player_name must be at most {MAX_NAME_LENGTH} characters")
    return name
