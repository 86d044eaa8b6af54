import logging
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.todo import TodoCreate, TodoOut, TodoUpdate
from app.services.todo_service import TodoService
from app.database import get_db
from app.dependencies import get_todo_service, require_user

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_user)])

@router.get("", response_model=list[TodoOut])
async def list_todos(
    user: str = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    logger.info("Getting TODOs for USER: %s", user)
    return await service.list_todos(db)

@router.post("", response_model=TodoOut, status_code=201)
async def create_todo(
    todo_in: TodoCreate,
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    return await service.create_todo(db, todo_in)

@router.put("", status_code=204, response_class=Response)
async def update_todo(
    todo_in: TodoUpdate,
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    logger.info("GOT PUT REQUEST FOR: %d", todo_in.id)
    await service.update_todo(db, todo_in)
    return Response(status_code=204)

@router.delete("/{todo_id}", response_model=int)
async def delete_todo(
    todo_id: int,
    db: AsyncSession = Depends(get_db),
    service: TodoService = Depends(get_todo_service),
):
    logger.info("GOT DELETE REQUEST FOR: %d", todo_id)
    return await service.delete_todo(db, todo_id)
