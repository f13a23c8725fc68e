from datetime import datetime

from sqlalchemy import BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from apps.api.database import Base


class BaseModel(Base):
    """Abstract base model with common fields for all tables.

    Every model gets:
    - id: an auto-incrementing integer primary key (newer rows have larger ids)
    - created_at: timestamp set by the database on insert
    - updated_at: timestamp refreshed on every change

    'abstract = True' means SQLAlchemy won't create a table for BaseModel itself.
    eager_defaults makes INSERT ... RETURNING load the server-side timestamps,
    so records are complete right after flush without a lazy load.
    """

    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),  # Database sets this, not Python
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
