import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import translate_errors
from app.repositories.reminder_repo import ReminderRepository
from app.repositories.todo_repo import TodoRepository
from app.schemas.todo import TodoCreate, TodoOut, TodoUpdate

logger = logging.getLogger(__name__)

class TodoService:
    def __init__(self, todos: TodoRepository, reminders: ReminderRepository):
        self.todos = todos
        self.reminders = reminders

    @translate_errors
    async def create_todo(self, db: AsyncSession, todo_in: TodoCreate) -> TodoOut:
        todo = await self.todos.create(db, todo_in)
        await db.commit()
        return TodoOut.model_validate(todo)

    async def list_todos(self, db: AsyncSession) -> List[TodoOut]:
        rows = await self.todos.list_with_reminders(db)
        return [TodoOut.model_validate(row) for row in rows]

    @translate_errors
    async def update_todo(self, db: AsyncSession, todo_in: TodoUpdate) -> None:
        await self.todos.update(db, todo_in)
        await db.commit()

    @translate_errors
    async def delete_todo(self, db: AsyncSession, todo_id: int) -> int:
        """
        Delete the reminders of a todo and then the todo itself in a single
        transaction. Returns the combined number of rows removed.
        """
        async with db.begin():
            deleted_reminders = await self.reminders.delete_for_todo(db, todo_id)
            deleted_todos = await self.todos.delete(db, todo_id)
        logger.info("Deleted %d todos and %d reminders", deleted_todos, deleted_reminders)
        return deleted_todos + deleted_reminders
