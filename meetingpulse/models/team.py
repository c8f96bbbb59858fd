# meetingpulse/models/team.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from meetingpulse.db.base import Base


class Team(Base):
    """
    A team whose meetings are aggregated into weekly insights.
    """

    __tablename__ = "teams"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(64), nullable=False, unique=True, index=True)
    department_id = Column(String(64), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz=timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Team id={self.id} slug={self.slug}>"
