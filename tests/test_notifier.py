import json
from datetime import datetime, timezone

import httpx
import pytest

from app.features.reminders import NotifierError, TelegramNotifier, format_reminder_message
from app.schemas import ReminderSnapshot

DUE = datetime(2025, 11, 8, 9, 30, tzinfo=timezone.utc)


def _reminder(**overrides):
    data = {"id": 5, "owner_id": 123456, "due_at": DUE, "message": "Check email"}
    data.update(overrides)
    return ReminderSnapshot(**data)


class TestFormatReminderMessage:
    """Test notification text rendering."""

    def test_plain_message(self):
        assert format_reminder_message(_reminder()) == "🔔 *Reminder!*\n\nCheck email"

    def test_missing_message_uses_default(self):
        text = format_reminder_message(_reminder(message=None))
        assert text.endswith("You have a reminder!")

    def test_blank_message_uses_default(self):
        text = format_reminder_message(_reminder(message="   "))
        assert text.endswith("You have a reminder!")

    def test_related_task_is_mentioned(self):
        text = format_reminder_message(_reminder(related_task_id=17))
        assert "📝 Related to task #17" in text

    def test_recurring_notice_includes_pattern(self):
        text = format_reminder_message(_reminder(is_recurring=True, recurrence_pattern="daily"))
        assert "🔄 This is a recurring reminder (daily)" in text

    def test_non_recurring_has_no_notice(self):
        assert "recurring" not in format_reminder_message(_reminder(recurrence_pattern="daily"))

    def test_user_markdown_is_escaped(self):
        text = format_reminder_message(_reminder(message="call *bob* re: file_name"))
        assert "call \\*bob\\* re: file\\_name" in text


def _notifier_with(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramNotifier("123:abc", api_base="https://tg.test", client=client)


@pytest.mark.asyncio
async def test_send_posts_to_bot_api():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

    await _notifier_with(handler).send(42, "hello")

    assert len(seen) == 1
    assert str(seen[0].url) == "https://tg.test/bot123:abc/sendMessage"
    body = json.loads(seen[0].content)
    assert body == {"chat_id": 42, "text": "hello", "parse_mode": "Markdown"}


@pytest.mark.asyncio
async def test_http_error_status_raises_notifier_error():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(NotifierError):
        await _notifier_with(handler).send(42, "hello")


@pytest.mark.asyncio
async def test_rejected_message_raises_notifier_error():
    def handler(request):
        return httpx.Response(200, json={"ok": False, "description": "chat not found"})

    with pytest.raises(NotifierError, match="chat not found"):
        await _notifier_with(handler).send(42, "hello")


@pytest.mark.asyncio
async def test_transport_error_raises_notifier_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NotifierError):
        await _notifier_with(handler).send(42, "hello")


def test_token_is_required():
    with pytest.raises(ValueError):
        TelegramNotifier("")
