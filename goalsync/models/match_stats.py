from sqlalchemy import Column, String, DateTime, Integer, Boolean
from goalsync.core.database import Base, utcnow


class MatchStats(Base):
    __tablename__ = "match_stats"

    # One record per match, keyed by the match event id
    id = Column(String, primary_key=True)
    team_id = Column(String, index=True, nullable=False)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    possession = Column(Integer, nullable=True)  # percentage for the home team
    status = Column(String, default="draft")  # "draft", "final"
    visibility = Column(String, default="private")  # "private", "public"
    is_complete = Column(Boolean, default=False)
    submitted_by = Column(String, nullable=True)
    submitted_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    released_at = Column(DateTime, nullable=True)
    released_by = Column(String, nullable=True)
    skip_reason = Column(String, nullable=True)
    skip_reason_note = Column(String, nullable=True)

    @property
    def match_id(self) -> str:
        return self.id
