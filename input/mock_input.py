"""
Mock (test) intent provider.

Plays back scripted drive intents and mode tokens, one per read, for
testing without a middleware bridge or controller.
"""

import logging
from typing import List, Optional

from core.types import DriveIntent


logger = logging.getLogger(__name__)


class MockInput:
    """
    Mock intent provider for testing.

    Each read_drive_intent() call returns the next scripted entry. A None
    entry means "nothing new this cycle". After the script ends it keeps
    returning None, which is what a client that went away looks like.
    """

    def __init__(
        self,
        intents: Optional[List[Optional[DriveIntent]]] = None,
        tokens: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize mock input.

        Args:
            intents: Entries returned in sequence, one per cycle
            tokens: Mode tokens returned in sequence, one per cycle
        """
        self._intents = list(intents or [])
        self._tokens = list(tokens or [])
        self._index = 0
        self._token_index = 0
        self._running = False

    async def start(self) -> None:
        """Start the input provider"""
        logger.info(f"[MOCK INPUT] Started - Script mode ({len(self._intents)} entries)")
        self._running = True
        self._index = 0
        self._token_index = 0

    async def stop(self) -> None:
        """Stop the input provider"""
        logger.info("[MOCK INPUT] Stopped")
        self._running = False

    async def read_drive_intent(self) -> Optional[DriveIntent]:
        """Return next scripted intent"""
        if not self._running or self._index >= len(self._intents):
            return None

        intent = self._intents[self._index]
        self._index += 1
        return intent

    async def read_mode_token(self) -> Optional[str]:
        """Return next scripted mode token"""
        if not self._running or self._token_index >= len(self._tokens):
            return None

        token = self._tokens[self._token_index]
        self._token_index += 1
        return token

    def push_token(self, token: str) -> None:
        """Queue a mode token behind the scripted ones"""
        self._tokens.append(token)

    @property
    def exhausted(self) -> bool:
        """True once every scripted intent was handed out"""
        return self._index >= len(self._intents)

    def reset(self) -> None:
        """Reset to beginning of script"""
        self._index = 0
        self._token_index = 0

    def load_script(self, script_name: str, cycle_hz: float = 100.0) -> None:
        """
        Load a predefined test script.

        Args:
            script_name: Name of script to load from TestScripts
            cycle_hz: Supervisor cycle rate the script is timed for
        """
        script_map = {
            "forward": TestScripts.forward_drive,
            "spin": TestScripts.spin_in_place,
            "square": TestScripts.square,
            "client_lost": TestScripts.client_lost,
        }

        if script_name in script_map:
            self._intents = script_map[script_name](cycle_hz)
            logger.info(f"Loaded script '{script_name}' with {len(self._intents)} entries")
        else:
            logger.warning(f"Unknown script '{script_name}'")


def _hold(intent: Optional[DriveIntent], seconds: float, cycle_hz: float) -> List[Optional[DriveIntent]]:
    """Repeat an entry for the given number of seconds of cycles"""
    return [intent] * int(round(seconds * cycle_hz))


class TestScripts:
    """Pre-defined test scripts"""

    __test__ = False  # not a pytest class

    @staticmethod
    def forward_drive(cycle_hz: float = 100.0) -> List[Optional[DriveIntent]]:
        """Drive 0.2 m/s straight for two seconds, then halt"""
        return (
            _hold(DriveIntent(0.2, 0.0), 2.0, cycle_hz)
            + _hold(DriveIntent.halt(), 0.5, cycle_hz)
        )

    @staticmethod
    def spin_in_place(cycle_hz: float = 100.0) -> List[Optional[DriveIntent]]:
        """Rotate left at 1 rad/s for pi seconds (half a turn)"""
        return (
            _hold(DriveIntent(0.0, 1.0), 3.14159, cycle_hz)
            + _hold(DriveIntent.halt(), 0.5, cycle_hz)
        )

    @staticmethod
    def square(cycle_hz: float = 100.0) -> List[Optional[DriveIntent]]:
        """Four 0.5 m legs joined by quarter turns"""
        script: List[Optional[DriveIntent]] = []
        for _ in range(4):
            script += _hold(DriveIntent(0.25, 0.0), 2.0, cycle_hz)
            script += _hold(DriveIntent(0.0, 1.0), 1.5708, cycle_hz)
        script += _hold(DriveIntent.halt(), 0.5, cycle_hz)
        return script

    @staticmethod
    def client_lost(cycle_hz: float = 100.0) -> List[Optional[DriveIntent]]:
        """Drive forward, then the client disappears without stopping"""
        return (
            _hold(DriveIntent(0.2, 0.0), 1.0, cycle_hz)
            + _hold(None, 3.0, cycle_hz)
        )
