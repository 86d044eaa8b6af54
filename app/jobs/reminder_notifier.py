"""
Offline reminder notifier.

Each cycle asks the presence endpoint whether the user is online. When the
answer is exactly "false", the todos that carry a reminder are fetched from
the API, sent to the chat webhook as one message, and then deleted from the
API. Any failure ends the current cycle; the next cycle starts fresh.

Run with ``python -m app.jobs.reminder_notifier`` from cron (one minute of
checks per invocation) or ``--once`` for a single cycle.
"""

import argparse
import logging
import time
from typing import Callable, List, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from app.config import NotifierSettings, load_notifier_settings
from app.logging_config import setup_logging
from app.schemas.todo import TodoOut

_todo_list = TypeAdapter(List[TodoOut])


def format_todo(todo: TodoOut) -> str:
    if todo.description:
        return f"{todo.title}: {todo.description}"
    return todo.title


def compose_message(chat_user_id: str, todos: Sequence[TodoOut]) -> str:
    items = ",\n".join(format_todo(t) for t in todos)
    return f"Hey, <@{chat_user_id}>, don't forget!\n{items}"


class ReminderNotifier:
    def __init__(
        self,
        settings: NotifierSettings,
        client: httpx.Client,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.client = client
        self.log = logger or logging.getLogger(__name__)

    def _api_headers(self) -> dict:
        if self.settings.todos_cookie:
            return {"Cookie": self.settings.todos_cookie}
        return {}

    def user_is_offline(self) -> bool:
        try:
            resp = self.client.get(self.settings.user_online_url)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self.log.warning("Failed to fetch online status: %s", exc)
            return False
        return resp.text == "false"

    def fetch_reminder_todos(self) -> Optional[List[TodoOut]]:
        """Todos that have a reminder attached, or None if the API call failed."""
        try:
            resp = self.client.get(self.settings.todos_url, headers=self._api_headers())
            resp.raise_for_status()
            todos = _todo_list.validate_json(resp.content)
        except (httpx.HTTPError, ValidationError) as exc:
            self.log.warning("Failed to fetch todos: %s", exc)
            return None
        return [t for t in todos if t.username is not None]

    def send(self, todos: Sequence[TodoOut]) -> bool:
        message = compose_message(self.settings.chat_user_id, todos)
        try:
            resp = self.client.post(self.settings.webhook_url, json={"content": message})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self.log.error("Failed to send reminder message: %s", exc)
            return False
        return True

    def delete_todos(self, todos: Sequence[TodoOut]) -> None:
        for todo in todos:
            url = f"{self.settings.todos_url}/{todo.id}"
            try:
                resp = self.client.delete(url, headers=self._api_headers())
            except httpx.HTTPError as exc:
                self.log.error("Failed to delete TODO w/ ID %d: %s", todo.id, exc)
                continue
            self.log.info("Deleted TODO w/ ID %d status: %d %s", todo.id, resp.status_code, resp.reason_phrase)

    def run_once(self) -> List[TodoOut]:
        """One presence check; returns the todos that were notified."""
        if not self.user_is_offline():
            return []

        todos = self.fetch_reminder_todos()
        if not todos:
            return []

        self.log.info("User is offline and has %d todos, sending message now!", len(todos))
        if not self.send(todos):
            return []

        if self.settings.delete_after_notify:
            self.delete_todos(todos)
        return todos

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        checks = self.settings.checks_per_minute
        interval = 60.0 / checks
        for i in range(checks):
            self.run_once()
            if i < checks - 1:
                sleep(interval)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Send chat reminders while the user is offline.")
    parser.add_argument("--once", action="store_true", help="run a single check and exit")
    args = parser.parse_args(argv)

    settings = load_notifier_settings()
    setup_logging(settings.log_level)

    with httpx.Client(timeout=settings.http_timeout) as client:
        notifier = ReminderNotifier(settings, client)
        if args.once:
            notifier.run_once()
        else:
            notifier.run()


if __name__ == "__main__":
    main()
