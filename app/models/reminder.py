from sqlalchemy import Column, Integer, Text
from app.database import Base

class Reminder(Base):
    __tablename__ = "reminders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    # no ForeignKey: deletes are issued explicitly alongside the todo delete
    todo_id = Column(Integer, nullable=False, index=True)
    username = Column(Text, nullable=False)
