from sqlalchemy import Column, String, DateTime, Boolean, JSON
from goalsync.core.database import Base, new_id, utcnow


class Team(Base):
    __tablename__ = "teams"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    trainer_id = Column(String, index=True, nullable=False)
    # List of player user ids. Always reassigned, never mutated in place.
    players = Column(JSON, default=list)
    allow_player_injury_reporting = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
