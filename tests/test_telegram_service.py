from unittest.mock import MagicMock, patch

import httpx
import pytest

from telegram_service import PacedSender, TelegramClient


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(round(seconds, 6))
        self.now += seconds


@pytest.fixture()
def http_post():
    with patch("telegram_service.httpx.Client") as client_cls:
        post = MagicMock()
        client_cls.return_value.__enter__.return_value.post = post
        yield post


def _ok(url="https://api.telegram.org/botT/sendMessage"):
    return httpx.Response(200, json={"ok": True}, request=httpx.Request("POST", url))


def test_send_message_plain(http_post):
    http_post.return_value = _ok()
    TelegramClient("T").send_message(42, "hello")
    args, kwargs = http_post.call_args
    assert args[0] == "https://api.telegram.org/botT/sendMessage"
    assert kwargs["json"] == {"chat_id": 42, "text": "hello"}


def test_send_message_markdown(http_post):
    http_post.return_value = _ok()
    TelegramClient("T").send_message(42, "**hi**", markdown=True)
    assert http_post.call_args.kwargs["json"]["parse_mode"] == "Markdown"


def test_send_message_error_raises(http_post):
    url = "https://api.telegram.org/botT/sendMessage"
    http_post.return_value = httpx.Response(403, json={"ok": False}, request=httpx.Request("POST", url))
    with pytest.raises(httpx.HTTPStatusError):
        TelegramClient("T").send_message(42, "hello")


def test_paced_sender_allows_a_burst_then_paces():
    clock = FakeClock()
    client = MagicMock()
    sender = PacedSender(client, rate=2.0, burst=2, clock=clock, sleep=clock.sleep)

    for i in range(5):
        sender.send("42", f"m{i}")

    assert clock.sleeps == [0.5, 0.5, 0.5]
    assert [c.args[1] for c in client.send_message.call_args_list] == ["m0", "m1", "m2", "m3", "m4"]


def test_paced_sender_refills_over_time():
    clock = FakeClock()
    sender = PacedSender(MagicMock(), rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    sender.send("42", "a")
    clock.now += 5
    sender.send("42", "b")
    assert clock.sleeps == []


def test_paced_sender_buckets_are_per_chat():
    clock = FakeClock()
    sender = PacedSender(MagicMock(), rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    sender.send("1", "a")
    sender.send("2", "b")
    assert clock.sleeps == []


def test_paced_sender_passes_markdown_flag():
    client = MagicMock()
    PacedSender(client).send("42", "# hi", markdown=True)
    client.send_message.assert_called_once_with("42", "# hi", markdown=True)


def test_paced_sender_rejects_bad_settings():
    with pytest.raises(ValueError):
        PacedSender(MagicMock(), rate=0)


def test_refilled_buckets_are_forgotten():
    clock = FakeClock()
    sender = PacedSender(MagicMock(), rate=1.0, burst=2, clock=clock, sleep=clock.sleep)
    sender.send("quiet", "a")
    for _ in range(4):
        sender.send("busy", "b")
    clock.now += 0.5
    sender.send("new", "c")

    assert "quiet" not in sender._buckets
    assert "busy" in sender._buckets  # still paying off its backlog
    assert "new" in sender._buckets
