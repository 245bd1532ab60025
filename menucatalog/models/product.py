from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime

from menucatalog.database.session import Base

NAME_MAX_LENGTH = 60
DESCRIPTION_MAX_LENGTH = 200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, index=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    # Set in Python so the timestamp keeps sub-second precision on every backend
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
