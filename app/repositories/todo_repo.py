from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import translate_errors
from app.models.reminder import Reminder
from app.models.todo import Todo
from app.schemas.todo import TodoCreate, TodoUpdate

class TodoRepository:
    """
    Statements on the todo table. Transactions are committed by the caller
    (the service layer).
    """

    @translate_errors
    async def create(self, db: AsyncSession, todo_in: TodoCreate) -> Todo:
        todo = Todo(**todo_in.model_dump())
        db.add(todo)
        # flush so the database-assigned id is populated on the instance
        await db.flush()
        return todo

    @translate_errors
    async def list_with_reminders(self, db: AsyncSession):
        stmt = (
            select(Todo.id, Todo.title, Todo.description, Reminder.username)
            .outerjoin(Reminder, Todo.id == Reminder.todo_id)
            .order_by(Todo.id)
        )
        result = await db.execute(stmt)
        return result.all()

    @translate_errors
    async def update(self, db: AsyncSession, todo_in: TodoUpdate) -> int:
        stmt = (
            update(Todo)
            .where(Todo.id == todo_in.id)
            .values(title=todo_in.title, description=todo_in.description)
        )
        result = await db.execute(stmt)
        return result.rowcount or 0

    @translate_errors
    async def delete(self, db: AsyncSession, todo_id: int) -> int:
        result = await db.execute(delete(Todo).where(Todo.id == todo_id))
        return result.rowcount or 0
