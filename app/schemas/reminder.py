from pydantic import BaseModel

class ReminderBase(BaseModel):
    # id is the todo being reminded about, not the reminder row
    id: int
    username: str

class ReminderCreate(ReminderBase):
    pass

class ReminderOut(ReminderBase):
    pass
