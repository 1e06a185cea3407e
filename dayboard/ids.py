"""Task identifier generation."""

import random
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

_rng = random.SystemRandom()


def _base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def next_id() -> str:
    """Return a new task id: a random base-36 part followed by the time in ms."""
    random_part = _base36(_rng.getrandbits(52))
    time_part = _base36(int(time.time() * 1000))
    return random_part + time_part
