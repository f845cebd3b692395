# upleer/models/session.py
from sqlalchemy import Column, String, TIMESTAMP, Index

from upleer.database import Base
from upleer.models.base import JSONType


class Session(Base):
    """
    Server-side session store shared with the login flow. `sess` holds either
    the OIDC claims (under passport.user.claims) or a plain {"userId": ...}.
    """
    __tablename__ = "sessions"
    __table_args__ = (
        Index("IDX_session_expire", "expire"),
    )

    sid = Column(String, primary_key=True)
    sess = Column(JSONType, nullable=False)
    expire = Column(TIMESTAMP(timezone=False), nullable=False)
