from fastapi import APIRouter, Depends

from app.schemas.user import WhoAmI
from app.dependencies import require_user

router = APIRouter()

@router.get("/whoami", response_model=WhoAmI)
async def whoami(user: str = Depends(require_user)):
    return {"user": user}
