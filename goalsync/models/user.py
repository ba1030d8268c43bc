from sqlalchemy import Column, String, DateTime, JSON
from goalsync.core.database import Base, new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    type = Column(String, nullable=False)  # "trainer" or "player"
    team_id = Column(String, index=True, nullable=True)
    role = Column(String, nullable=True)  # "staff", "player" or None when teamless
    number = Column(String, nullable=True)
    position = Column(String, nullable=True)
    status = Column(String, default="active")  # "active", "injured", "inactive"
    push_tokens = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
