# telegram_service.py
import logging
import threading
import time

import httpx

log = logging.getLogger(__name__)

API_BASE = "https://api.telegram.org"


class TelegramClient:
    """Thin wrapper over the Bot API sendMessage call."""

    def __init__(self, token: str, timeout: float = 30, base_url: str = API_BASE):
        self.token = token
        self.timeout = timeout
        self.base_url = base_url

    def send_message(self, chat_id, text: str, markdown: bool = False):
        body = {"chat_id": chat_id, "text": text}
        if markdown:
            body["parse_mode"] = "Markdown"
        url = f"{self.base_url}/bot{self.token}/sendMessage"
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(url, json=body)
            if resp.is_error:
                log.error("sendMessage to %s failed: %s %s", chat_id, resp.status_code, resp.text[:300])
            resp.raise_for_status()
            return resp.json()


class PacedSender:
    """
    Sends through a client while keeping each chat under a token-bucket rate:
    up to `burst` messages at once, then `rate` messages per second.
    """

    def __init__(self, client, rate: float = 1.0, burst: int = 3,
                 clock=time.monotonic, sleep=time.sleep):
        if rate <= 0 or burst < 1:
            raise ValueError("rate must be positive and burst at least 1")
        self.client = client
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._buckets = {}  # chat_id -> (tokens, last refill time)
        self._last_sweep = clock()

    def _reserve(self, chat_id) -> float:
        """Take one token for the chat; return how long to wait before sending."""
        with self._lock:
            now = self._clock()
            self._sweep(now)
            tokens, last = self._buckets.get(chat_id, (float(self.burst), now))
            tokens = min(self.burst, tokens + max(0.0, now - last) * self.rate)
            tokens -= 1
            wait = 0.0 if tokens >= 0 else -tokens / self.rate
            self._buckets[chat_id] = (tokens, now)
            return wait

    def _sweep(self, now):
        """Forget chats whose bucket has refilled; a full bucket is the default."""
        if now - self._last_sweep < self.burst / self.rate:
            return
        self._buckets = {
            chat_id: (tokens, last)
            for chat_id, (tokens, last) in self._buckets.items()
            if tokens + (now - last) * self.rate < self.burst
        }
        self._last_sweep = now

    def send(self, chat_id, text: str, markdown: bool = False):
        wait = self._reserve(chat_id)
        if wait > 0:
            log.debug("pacing chat %s for %.2fs", chat_id, wait)
            self._sleep(wait)
        return self.client.send_message(chat_id, text, markdown=markdown)

