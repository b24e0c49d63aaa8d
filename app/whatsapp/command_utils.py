"""
Utility functions for bot command handling.
Contains the addressing rules and text normalization applied before a
command is matched.
"""

import re
import logging
from typing import Optional

from .client import IncomingMessage
from .jid import jid_number

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"@\d+")


def normalize_command_text(text: str) -> str:
    return text.lower().strip()


def strip_mentions(text: str) -> str:
    """Remove mention tokens (``@`` followed by digits) from a message."""
    return MENTION_PATTERN.sub("", text)


def is_bot_mentioned(message: IncomingMessage, bot_jid: Optional[str]) -> bool:
    """Check whether any mentioned JID refers to the bot's own number."""
    bot_number = jid_number(bot_jid)
    if not bot_number:
        return False
    return any(bot_number in jid for jid in message.mentioned_jids)


def resolve_command_text(message: IncomingMessage, bot_jid: Optional[str]) -> Optional[str]:
    """
    Decide whether a message is addressed to the bot and extract its command.

    Direct messages always qualify. Group messages qualify only when they
    mention the bot, and have their mention tokens stripped.

    Returns:
        str: Normalized command text, or None if the message should be ignored
    """
    if message.from_me or not message.text:
        return None

    if not message.is_group:
        logger.info(f"📱 Private message from {message.sender_jid}")
        logger.debug(f"Private message text: {message.text}")
        return normalize_command_text(message.text)

    if is_bot_mentioned(message, bot_jid):
        command = normalize_command_text(strip_mentions(message.text))
        logger.info(
            f"👥 Mentioned in group {message.chat_jid} by {message.sender_jid}: {command}"
        )
        return command

    return None
