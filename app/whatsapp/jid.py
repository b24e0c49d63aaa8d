"""
Helpers for WhatsApp conversation identifiers (JIDs).
"""

from typing import Optional

DIRECT_SUFFIX = "s.whatsapp.net"
GROUP_SUFFIX = "g.us"


def to_direct_jid(number: str) -> str:
    """Normalize a bare phone number to a direct-conversation JID."""
    if f"@{DIRECT_SUFFIX}" in number:
        return number
    return f"{number}@{DIRECT_SUFFIX}"


def to_group_jid(group_id: str) -> str:
    """Normalize a bare group id to a group JID."""
    if f"@{GROUP_SUFFIX}" in group_id:
        return group_id
    return f"{group_id}@{GROUP_SUFFIX}"


def is_group_jid(jid: str) -> bool:
    return f"@{GROUP_SUFFIX}" in jid


def jid_number(jid: Optional[str]) -> Optional[str]:
    """
    Extract the numeric user part of a JID.

    Device JIDs look like ``628123:12@s.whatsapp.net``; both the device
    suffix and the server are dropped.
    """
    if not jid:
        return None
    return jid.split("@", 1)[0].split(":", 1)[0]
