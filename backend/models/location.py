"""Location model for DB persistence."""
from datetime import datetime

from sqlalchemy import DateTime, Double, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class Location(Base):
    """Location table: id, user_id, lat, long, created_at.

    ``id`` autoincrements and is never reused after a delete; ``user_id`` is the
    resolved identity of the creator and never changes.
    """

    __tablename__ = "locations"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    lat: Mapped[float] = mapped_column(Double, nullable=False)
    long: Mapped[float] = mapped_column(Double, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )
