# meetingpulse/models/magic_link_token.py
from sqlalchemy import Column, DateTime, String

from meetingpulse.db.base import Base


class MagicLinkToken(Base):
    """
    Pending magic-link token. The row is deleted when the token is redeemed
    or found expired.
    """

    __tablename__ = "magic_link_tokens"

    token = Column(String(128), primary_key=True)
    email = Column(String(320), nullable=False, index=True)
    expires = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<MagicLinkToken email={self.email} expires={self.expires}>"
