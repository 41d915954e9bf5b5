"""
Mode command tokens.

Text tokens from the mode topic map 1:1 onto ModeCommand values;
anything else is ignored.
"""

import logging
from typing import Optional

from .types import ModeCommand


logger = logging.getLogger(__name__)

_TOKENS = {command.value: command for command in ModeCommand}


def parse_mode_token(token: str) -> Optional[ModeCommand]:
    """
    Look up the mode command for a token.

    Matching ignores surrounding whitespace and case.

    Args:
        token: Raw token, e.g. "safe"

    Returns:
        ModeCommand, or None for unknown tokens
    """
    command = _TOKENS.get(token.strip().lower())
    if command is None:
        logger.debug(f"Ignoring unknown mode token {token!r}")
    return command
