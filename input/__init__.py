"""Drive intent and mode token providers"""

from input.mock_input import MockInput, TestScripts

try:
    from input.gamepad_input import GamepadInput
    HAS_GAMEPAD = True
except ImportError:
    # pygame missing; install the "gamepad" extra
    HAS_GAMEPAD = False


def create_intent_provider(use_gamepad: bool = False, script: str = "forward", cycle_hz: float = 100.0):
    """
    Build the intent provider the launcher asked for.

    Args:
        use_gamepad: Teleop from a game controller instead of a script
        script: Name of the MockInput script to play
        cycle_hz: Supervisor cycle rate the script is timed for

    Raises:
        ImportError: Gamepad requested but pygame is not installed
    """
    if use_gamepad:
        if not HAS_GAMEPAD:
            raise ImportError("pygame is required for gamepad input")
        return GamepadInput()

    provider = MockInput()
    provider.load_script(script, cycle_hz=cycle_hz)
    return provider


__all__ = ["MockInput", "TestScripts", "create_intent_provider", "HAS_GAMEPAD"]
if HAS_GAMEPAD:
    __all__.append("GamepadInput")
