"""
Tests for command addressing and normalization helpers.
"""

import logging

from app.whatsapp.command_utils import (
    is_bot_mentioned,
    normalize_command_text,
    resolve_command_text,
    strip_mentions,
)
from app.whatsapp.jid import is_group_jid, jid_number, to_direct_jid, to_group_jid

from conftest import BOT_JID, direct_message, group_message


class TestNormalization:
    def test_normalize_lowercases_and_trims(self):
        assert normalize_command_text("  StAtUs \n") == "status"

    def test_strip_mentions_removes_numeric_tokens(self):
        assert strip_mentions("@62812345678 STATUS @1") == " STATUS "

    def test_strip_mentions_keeps_non_numeric_at(self):
        assert strip_mentions("mail@example status") == "mail@example status"


class TestAddressing:
    def test_mentioned_group_message_yields_command(self):
        message = group_message(
            "@62812345678 STATUS", mentioned=["62812345678@s.whatsapp.net"]
        )
        assert resolve_command_text(message, BOT_JID) == "status"

    def test_direct_message_keeps_mention_tokens(self):
        assert resolve_command_text(direct_message("@123 stop"), BOT_JID) == "@123 stop"

    def test_unmentioned_group_message_is_ignored(self):
        assert resolve_command_text(group_message("status"), BOT_JID) is None

    def test_group_message_needs_bound_identity(self):
        message = group_message("@62812345678 stop", mentioned=["62812345678@s.whatsapp.net"])
        assert resolve_command_text(message, None) is None

    def test_own_message_is_ignored(self):
        assert resolve_command_text(direct_message("stop", from_me=True), BOT_JID) is None

    def test_private_message_text_stays_out_of_info_log(self, caplog):
        caplog.set_level(logging.INFO, logger="app.whatsapp.command_utils")

        command = resolve_command_text(direct_message("my secret pin 4321"), BOT_JID)

        assert command == "my secret pin 4321"
        assert "628999000111@s.whatsapp.net" in caplog.text
        assert "4321" not in caplog.text

    def test_is_bot_mentioned_ignores_device_suffix(self):
        message = group_message("hi", mentioned=["628111@s.whatsapp.net", "62812345678@s.whatsapp.net"])
        assert is_bot_mentioned(message, BOT_JID)
        assert not is_bot_mentioned(group_message("hi"), BOT_JID)


class TestJids:
    def test_bare_number_gets_direct_suffix(self):
        assert to_direct_jid("628111") == "628111@s.whatsapp.net"
        assert to_direct_jid("628111@s.whatsapp.net") == "628111@s.whatsapp.net"

    def test_bare_group_id_gets_group_suffix(self):
        assert to_group_jid("120363123") == "120363123@g.us"
        assert to_group_jid("120363123@g.us") == "120363123@g.us"

    def test_jid_number(self):
        assert jid_number("62812345678:7@s.whatsapp.net") == "62812345678"
        assert jid_number("628111@s.whatsapp.net") == "628111"
        assert jid_number(None) is None

    def test_is_group_jid(self):
        assert is_group_jid("120363123@g.us")
        assert not is_group_jid("628111@s.whatsapp.net")
