from sqlalchemy.ext.asyncio import AsyncSession
from app.database import translate_errors
from app.repositories.reminder_repo import ReminderRepository
from app.schemas.reminder import ReminderCreate, ReminderOut

class ReminderService:
    def __init__(self, reminders: ReminderRepository):
        self.reminders = reminders

    @translate_errors
    async def create_reminder(self, db: AsyncSession, reminder_in: ReminderCreate) -> ReminderOut:
        # the todo id is not checked; callers attach reminders to existing todos
        reminder = await self.reminders.create(db, reminder_in)
        await db.commit()
        return ReminderOut(id=reminder.todo_id, username=reminder.username)
