from pydantic import BaseModel, ConfigDict
from typing import Optional

class TodoBase(BaseModel):
    title: str
    description: Optional[str] = None

class TodoCreate(TodoBase):
    pass

class TodoUpdate(TodoBase):
    id: int

class TodoOut(TodoBase):
    id: int
    username: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)
