# -*- coding: utf-8 -*-
from typing import NamedTuple, Optional

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


class CooldownStatus(NamedTuple):
    allowed: bool
    remaining_ms: int = 0

    @property
    def parts(self) -> tuple[int, int, int]:
        """(days, hours, minutes) left, floored."""
        days, rest = divmod(max(self.remaining_ms, 0), DAY_MS)
        hours, rest = divmod(rest, HOUR_MS)
        return days, hours, rest // MINUTE_MS


def check_cooldown(now_ms: int, last_ms: Optional[int], duration_ms: int) -> CooldownStatus:
    """Allowed when there is no record or the window has fully elapsed."""
    if last_ms is None:
        return CooldownStatus(True)
    elapsed = now_ms - last_ms
    if elapsed >= duration_ms:
        return CooldownStatus(True)
    return CooldownStatus(False, duration_ms - elapsed)


def format_remaining(status: CooldownStatus) -> str:
    days, hours, minutes = status.parts
    return f"{days} day(s), {hours} hour(s), {minutes} minute(s)"
