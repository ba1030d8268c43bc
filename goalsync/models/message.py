from sqlalchemy import Column, String, DateTime, Boolean, Text, JSON
from goalsync.core.database import Base, new_id, utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=new_id)
    team_id = Column(String, index=True, nullable=False)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=True)
    text = Column(Text, nullable=False)
    type = Column(String, default="message")  # "message", "announcement", "event"
    payload = Column(JSON, nullable=True)  # announcement or event summary
    edited = Column(Boolean, default=False)
    read_by = Column(JSON, default=list)
    timestamp = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=True)
