import time

from sqlalchemy import Column, Float, Integer, String, Text

from .db import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(64), primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="todo")

    priority = Column(Integer, nullable=True)
    # whole seconds since epoch
    due_date = Column(Integer, nullable=True)

    # sub-second precision keeps newest-first ordering stable; the wire floors them
    created_at = Column(Float, nullable=False, default=time.time, index=True)
    updated_at = Column(Float, nullable=False, default=time.time)
