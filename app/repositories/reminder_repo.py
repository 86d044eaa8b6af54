from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import translate_errors
from app.models.reminder import Reminder
from app.schemas.reminder import ReminderCreate

class ReminderRepository:
    @translate_errors
    async def create(self, db: AsyncSession, reminder_in: ReminderCreate) -> Reminder:
        reminder = Reminder(todo_id=reminder_in.id, username=reminder_in.username)
        db.add(reminder)
        await db.flush()
        return reminder

    @translate_errors
    async def delete_for_todo(self, db: AsyncSession, todo_id: int) -> int:
        result = await db.execute(delete(Reminder).where(Reminder.todo_id == todo_id))
        return result.rowcount or 0
