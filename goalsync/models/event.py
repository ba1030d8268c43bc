from sqlalchemy import Column, String, DateTime, Boolean, Text, JSON
from goalsync.core.database import Base, new_id, utcnow


class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, default=new_id)
    team_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)  # "training", "match", "meeting"
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    location = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_outdoor = Column(Boolean, default=False)
    is_attendance_required = Column(Boolean, default=True)
    status = Column(String, default="scheduled")  # "scheduled", "completed", "cancelled"

    # Match specific
    opponent = Column(String, nullable=True)
    is_home_game = Column(Boolean, nullable=True)
    formation = Column(String, nullable=True)
    roster = Column(JSON, default=list)
    score_submitted = Column(Boolean, default=False)

    attendees = Column(JSON, default=list)
    absentees = Column(JSON, default=list)

    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
