from sqlalchemy import Column, String, DateTime
from goalsync.core.database import Base, new_id, utcnow


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(String, primary_key=True, default=new_id)
    team_id = Column(String, index=True, nullable=False)
    team_name = Column(String)
    player_email = Column(String, index=True, nullable=False)
    position = Column(String, nullable=True)
    number = Column(String, nullable=True)
    status = Column(String, default="pending")  # "pending", "accepted", "declined"
    created_at = Column(DateTime, default=utcnow)
    responded_at = Column(DateTime, nullable=True)
    responded_by = Column(String, nullable=True)
