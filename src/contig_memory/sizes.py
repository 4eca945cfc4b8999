from __future__ import annotations

from typing import Optional

from .memory_manager import MAX_SPACE_SIZE

_MULTIPLIERS = {"k": 1024, "m": 1024 * 1024}


def parse_size(token: str, limit: int = MAX_SPACE_SIZE) -> Optional[int]:
    """
    Parse a size such as "512", "64K" or "1m" into bytes.

    Returns None for anything malformed or larger than `limit`.
    """
    if not token:
        return None
    multiplier = _MULTIPLIERS.get(token[-1].lower())
    digits = token[:-1] if multiplier else token
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    total = int(digits) * (multiplier or 1)
    if total > limit:
        return None
    return total
