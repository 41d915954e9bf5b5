"""
Encoder delta decoding.

The Create 2 reports each wheel as a free-running signed 16-bit counter.
The decoder turns consecutive readings into signed per-frame deltas and
undoes the counter wraparound.
"""

import logging
from typing import Optional, Tuple

from .types import EncoderSample


logger = logging.getLogger(__name__)

COUNTER_SPAN = 65536

# Below the real 32768 wrap point so moderate slip between frames
# is not mistaken for a wrap.
WRAP_THRESHOLD = 30000


def wrap_delta(previous: int, current: int) -> int:
    """
    Corrected signed difference between two raw int16 counter readings.

    Args:
        previous: Earlier counter value
        current: Later counter value

    Returns:
        Delta in counts with wraparound removed
    """
    delta = current - previous
    if delta < -WRAP_THRESHOLD:
        delta += COUNTER_SPAN
    elif delta > WRAP_THRESHOLD:
        delta -= COUNTER_SPAN
    return delta


class EncoderDecoder:
    """
    Stateful decoder for the left/right counter pair.

    The first sample only seeds the stored counters and yields zero
    deltas; real deltas start with the second sample.
    """

    def __init__(self) -> None:
        self._previous: Optional[Tuple[int, int]] = None

    @property
    def has_previous(self) -> bool:
        return self._previous is not None

    def decode(self, sample: EncoderSample) -> Tuple[int, int]:
        """
        Return (left_delta, right_delta) for this sample.

        Args:
            sample: New sensor frame

        Returns:
            Wrap-corrected deltas in counts, (0, 0) on the first sample
        """
        current = (sample.left_count, sample.right_count)
        previous = self._previous
        self._previous = current

        if previous is None:
            logger.debug(f"Seeding encoder counters at L={current[0]} R={current[1]}")
            return 0, 0

        return (
            wrap_delta(previous[0], current[0]),
            wrap_delta(previous[1], current[1]),
        )

    def reset(self) -> None:
        """Forget stored counters; the next sample seeds again"""
        self._previous = None
