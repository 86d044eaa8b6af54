import httpx
from app.config import load_notifier_settings
from app.jobs.reminder_notifier import ReminderNotifier

def handler(event, context):
    """Scheduled Lambda entry point: one presence check per invocation."""
    settings = load_notifier_settings()
    with httpx.Client(timeout=settings.http_timeout) as client:
        notified = ReminderNotifier(settings, client).run_once()
    return {"notified": [t.id for t in notified]}
