"""Battery percentage and digit-LED text helpers"""

import math
from typing import Optional

DISPLAY_WIDTH = 4


def battery_percent(charge_mah: Optional[int], capacity_mah: Optional[int]) -> Optional[int]:
    """
    Charge as a whole percentage, halves rounded up (12.5 -> 13).

    None when either value is unusable.
    """
    if charge_mah is None or capacity_mah is None or capacity_mah <= 0:
        return None
    return math.floor(charge_mah / capacity_mah * 100.0 + 0.5)


def display_text(text: str) -> str:
    """Pad or cut text to exactly the four display characters"""
    return text[:DISPLAY_WIDTH].ljust(DISPLAY_WIDTH)


def battery_display_text(percent: int) -> str:
    """Percentage right-aligned on the display, e.g. '  87'"""
    return display_text(str(percent).rjust(DISPLAY_WIDTH))


BLANK_DISPLAY = display_text("")
