from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.reminder import ReminderCreate, ReminderOut
from app.services.reminder_service import ReminderService
from app.database import get_db
from app.dependencies import get_reminder_service, require_user

router = APIRouter(dependencies=[Depends(require_user)])

@router.post("", response_model=ReminderOut, status_code=201)
async def create_reminder(
    reminder_in: ReminderCreate,
    db: AsyncSession = Depends(get_db),
    service: ReminderService = Depends(get_reminder_service),
):
    return await service.create_reminder(db, reminder_in)
