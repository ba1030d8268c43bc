from sqlalchemy import Column, String, DateTime, Text, JSON, UniqueConstraint
from goalsync.core.database import Base, new_id, utcnow


class PlayerMatchStats(Base):
    __tablename__ = "player_match_stats"
    __table_args__ = (UniqueConstraint("match_id", "player_id", name="uq_player_match_stats"),)

    id = Column(String, primary_key=True, default=new_id)
    match_id = Column(String, index=True, nullable=False)
    player_id = Column(String, index=True, nullable=False)
    stats = Column(JSON, nullable=False)
    status = Column(String, default="pending")  # "pending", "approved", "rejected"
    submitted_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String, nullable=True)
    comments = Column(Text, nullable=True)
