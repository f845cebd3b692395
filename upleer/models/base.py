# upleer/models/base.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Numeric
from sqlalchemy.dialects.postgresql import JSONB


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the `timestamp without time zone` columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# JSONB on Postgres, plain JSON elsewhere (the test suite runs on SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def Money():
    return Numeric(10, 2)
