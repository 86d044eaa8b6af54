import json
import logging

import httpx
import pytest

from app.config import NotifierSettings
from app.jobs.reminder_notifier import ReminderNotifier, compose_message, format_todo
from app.schemas.todo import TodoOut

ONLINE_URL = "http://presence.test/online"
TODOS_URL = "http://api.test/todos"
WEBHOOK_URL = "http://chat.test/webhook"


class FakeCollaborators:
    """Presence endpoint, todo API and chat webhook behind one MockTransport."""

    def __init__(self, online="false", todos=None, webhook_status=204, fail_presence=False):
        self.online = online
        self.todos = todos or []
        self.webhook_status = webhook_status
        self.fail_presence = fail_presence
        self.webhook_posts = []
        self.deleted = []
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == ONLINE_URL:
            if self.fail_presence:
                raise httpx.ConnectError("presence down", request=request)
            return httpx.Response(200, text=self.online)
        if url == TODOS_URL and request.method == "GET":
            return httpx.Response(200, json=self.todos)
        if url.startswith(TODOS_URL + "/") and request.method == "DELETE":
            self.deleted.append(int(url.rsplit("/", 1)[1]))
            return httpx.Response(200, json=2)
        if url == WEBHOOK_URL:
            self.webhook_posts.append(json.loads(request.content))
            return httpx.Response(self.webhook_status)
        return httpx.Response(404)


def make_notifier(fake, **overrides):
    values = dict(
        user_online_url=ONLINE_URL,
        todos_url=TODOS_URL,
        webhook_url=WEBHOOK_URL,
        chat_user_id="1234",
    )
    values.update(overrides)
    client = httpx.Client(transport=httpx.MockTransport(fake))
    return ReminderNotifier(NotifierSettings(**values), client, logger=logging.getLogger("test.notifier"))


TWO_REMINDERS = [
    {"id": 1, "title": "Buy milk", "description": "2%", "username": "bob"},
    {"id": 2, "title": "Read", "description": None, "username": None},
    {"id": 3, "title": "Call mom", "description": "", "username": "bob"},
]


def test_format_todo():
    assert format_todo(TodoOut(id=1, title="Buy milk", description="")) == "Buy milk"
    assert format_todo(TodoOut(id=1, title="Buy milk", description=None)) == "Buy milk"
    assert format_todo(TodoOut(id=1, title="Buy milk", description="2%")) == "Buy milk: 2%"

def test_compose_message():
    todos = [TodoOut(id=1, title="A", description="x"), TodoOut(id=2, title="B")]
    assert compose_message("42", todos) == "Hey, <@42>, don't forget!\nA: x,\nB"

def test_online_user_gets_no_message():
    fake = FakeCollaborators(online="true", todos=TWO_REMINDERS)
    notified = make_notifier(fake).run_once()
    assert notified == []
    assert fake.webhook_posts == []
    # presence check only, todos are never fetched
    assert [str(r.url) for r in fake.requests] == [ONLINE_URL]

def test_presence_body_must_be_exactly_false():
    fake = FakeCollaborators(online="False\n", todos=TWO_REMINDERS)
    assert make_notifier(fake).run_once() == []
    assert fake.webhook_posts == []

def test_offline_without_reminders_sends_nothing():
    fake = FakeCollaborators(todos=[{"id": 2, "title": "Read", "description": None, "username": None}])
    assert make_notifier(fake).run_once() == []
    assert fake.webhook_posts == []
    assert fake.deleted == []

def test_offline_with_reminders_sends_one_message_and_deletes():
    fake = FakeCollaborators(todos=TWO_REMINDERS)
    notified = make_notifier(fake).run_once()

    assert [t.id for t in notified] == [1, 3]
    assert fake.webhook_posts == [
        {"content": "Hey, <@1234>, don't forget!\nBuy milk: 2%,\nCall mom"}
    ]
    assert fake.deleted == [1, 3]

def test_cleanup_can_be_disabled():
    fake = FakeCollaborators(todos=TWO_REMINDERS)
    make_notifier(fake, delete_after_notify=False).run_once()
    assert len(fake.webhook_posts) == 1
    assert fake.deleted == []

def test_presence_transport_error_skips_cycle():
    fake = FakeCollaborators(todos=TWO_REMINDERS, fail_presence=True)
    notifier = make_notifier(fake)
    assert notifier.run_once() == []
    assert fake.webhook_posts == []

def test_webhook_failure_skips_cleanup():
    fake = FakeCollaborators(todos=TWO_REMINDERS, webhook_status=500)
    assert make_notifier(fake).run_once() == []
    assert len(fake.webhook_posts) == 1
    assert fake.deleted == []

def test_todos_fetch_failure_stops_cycle():
    def handler(request):
        if str(request.url) == ONLINE_URL:
            return httpx.Response(200, text="false")
        if str(request.url) == TODOS_URL:
            return httpx.Response(401)
        pytest.fail(f"unexpected request {request.method} {request.url}")

    assert make_notifier(handler).run_once() == []

def test_api_cookie_is_forwarded():
    fake = FakeCollaborators(todos=TWO_REMINDERS)
    make_notifier(fake, todos_cookie="auth=abc").run_once()
    api_calls = [r for r in fake.requests if str(r.url).startswith(TODOS_URL)]
    assert api_calls
    assert all(r.headers["Cookie"] == "auth=abc" for r in api_calls)
    webhook = [r for r in fake.requests if str(r.url) == WEBHOOK_URL][0]
    assert "Cookie" not in webhook.headers

def test_run_checks_per_minute():
    fake = FakeCollaborators(online="true")
    sleeps = []
    make_notifier(fake, checks_per_minute=3).run(sleep=sleeps.append)
    assert len(fake.requests) == 3
    assert sleeps == [20.0, 20.0]
