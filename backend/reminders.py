# reminders.py
import logging

import httpx

import store

log = logging.getLogger(__name__)

REMINDER_TEXT = "🌞 Good morning! Don't forget to journal today. Use /add to write."


def send_daily_reminders(sender) -> int:
    """Nudge every chat that has ever journaled. Returns how many were reached."""
    sent = 0
    for chat_id in store.chat_ids_with_entries():
        try:
            sender.send(chat_id, REMINDER_TEXT)
        except httpx.HTTPStatusError as e:
            # A chat that blocked the bot shouldn't stop the rest.
            log.warning("reminder to chat %s failed: %s", chat_id, e.response.status_code)
            continue
        sent += 1
    log.info("daily reminder sent to %d chats", sent)
    return sent
