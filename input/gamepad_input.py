"""
Gamepad Intent Provider

Teleoperation from USB/wireless game controllers.
Tested with "Controller 1.02" (no-name controller).
"""

import logging
from typing import Dict, Optional

import pygame

from core.types import DriveIntent


logger = logging.getLogger(__name__)

# Button index -> mode token, sent once per press
DEFAULT_MODE_BUTTONS: Dict[int, str] = {
    1: "safe",     # B
    2: "full",     # X
    3: "start",    # Y
    6: "stop",     # Back
}


def stick_to_intent(
    x: float,
    y: float,
    deadman: bool,
    max_linear: float,
    max_angular: float,
    deadzone: float = 0.1,
) -> DriveIntent:
    """
    Convert raw stick axes to a drive intent.

    Args:
        x: Stick X axis (-1 left .. 1 right)
        y: Stick Y axis (-1 up .. 1 down, as pygame reports it)
        deadman: Hold-to-drive button state
        max_linear: Speed at full deflection (m/s)
        max_angular: Yaw rate at full deflection (rad/s)
        deadzone: Ignore deflection below this

    Returns:
        DriveIntent, halted when the deadman is released
    """
    if not deadman:
        return DriveIntent.halt()

    if abs(x) < deadzone:
        x = 0.0
    if abs(y) < deadzone:
        y = 0.0

    # Up is negative on most controllers; stick left turns left (positive yaw)
    return DriveIntent(
        linear_velocity=-y * max_linear,
        angular_velocity=-x * max_angular,
    )


class GamepadInput:
    """
    Game controller intent provider.

    Maps gamepad controls to robot motion:
    - Left stick: forward/back and turn
    - A button: Deadman switch
    - B / X / Y / Back: safe / full / start / stop mode commands
    """

    def __init__(
        self,
        max_linear: float = 0.3,
        max_angular: float = 2.0,
        deadzone: float = 0.1,
        mode_buttons: Optional[Dict[int, str]] = None,
    ) -> None:
        """
        Initialize gamepad input.

        Args:
            max_linear: Speed at full stick (m/s)
            max_angular: Yaw rate at full stick (rad/s)
            deadzone: Ignore stick movements below this threshold
            mode_buttons: Button index to mode token map
        """
        self._max_linear = max_linear
        self._max_angular = max_angular
        self._deadzone = deadzone
        self._mode_buttons = mode_buttons if mode_buttons is not None else dict(DEFAULT_MODE_BUTTONS)

        self._joystick: Optional[pygame.joystick.Joystick] = None
        self._running = False
        self._pressed: Dict[int, bool] = {}
        self._pending_token: Optional[str] = None

        self._button_a = 0  # Usually button 0
        self._axis_x = 0    # Left stick X
        self._axis_y = 1    # Left stick Y

    async def start(self) -> None:
        """Initialize pygame and connect to controller"""
        if self._running:
            return

        logger.info("Initializing gamepad input...")

        pygame.init()
        pygame.joystick.init()

        joystick_count = pygame.joystick.get_count()
        logger.info(f"Found {joystick_count} game controller(s)")

        if joystick_count == 0:
            raise RuntimeError("No game controllers found")

        self._joystick = pygame.joystick.Joystick(0)
        self._joystick.init()
        logger.info(f"Selected: {self._joystick.get_name()}")
        logger.info("Controls: left stick drives, hold A to enable, B=safe X=full Y=start Back=stop")

        self._running = True

    async def stop(self) -> None:
        """Disconnect from controller"""
        logger.info("Stopping gamepad input")
        self._running = False

        if self._joystick:
            self._joystick.quit()
            self._joystick = None

        pygame.joystick.quit()
        pygame.quit()

    async def read_drive_intent(self) -> Optional[DriveIntent]:
        """Sample the stick; a fresh intent every call while running"""
        if not self._running or not self._joystick:
            return None

        # Process pygame events (required to update joystick state)
        pygame.event.pump()

        x = self._joystick.get_axis(self._axis_x)
        y = self._joystick.get_axis(self._axis_y)
        deadman = bool(self._joystick.get_button(self._button_a))

        self._scan_mode_buttons()

        intent = stick_to_intent(x, y, deadman, self._max_linear, self._max_angular, self._deadzone)
        logger.debug(
            f"Stick: X={x:+.2f} Y={y:+.2f} deadman={deadman} "
            f"-> v={intent.linear_velocity:+.2f} w={intent.angular_velocity:+.2f}"
        )
        return intent

    async def read_mode_token(self) -> Optional[str]:
        token = self._pending_token
        self._pending_token = None
        return token

    def _scan_mode_buttons(self) -> None:
        """Latch a token on the press edge of a mode button"""
        for button, token in self._mode_buttons.items():
            if button >= self._joystick.get_numbuttons():
                continue
            down = bool(self._joystick.get_button(button))
            if down and not self._pressed.get(button, False):
                logger.info(f"Mode button {button}: {token}")
                self._pending_token = token
            self._pressed[button] = down
