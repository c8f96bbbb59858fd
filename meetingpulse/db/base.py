# meetingpulse/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the MeetingPulse service.

    ORM modules are registered on Base.metadata in `meetingpulse.db.session`,
    which imports them; models import this module, never the other way round.
    """
    pass
