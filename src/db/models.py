"""SQLAlchemy declarative base and ORM models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class EquipmentRecordModel(Base):
    """ORM model for persisted equipment instances.

    stats holds the bonus overlay only. Base stats are resolved
    from the definition registry when the instance is rebuilt.
    """

    __tablename__ = "equipment_records"

    instance_id: Mapped[str] = mapped_column(String, primary_key=True)
    item_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    count: Mapped[int] = mapped_column(Integer, default=1)
    stats: Mapped[dict] = mapped_column(JSON, default=dict)
    enchantments: Mapped[list] = mapped_column(JSON, default=list)
    curses: Mapped[list] = mapped_column(JSON, default=list)
    enchantment_levels: Mapped[list] = mapped_column(JSON, default=list)
    curse_levels: Mapped[list] = mapped_column(JSON, default=list)

    identified: Mapped[bool] = mapped_column(Boolean, default=False)
    stackable: Mapped[bool] = mapped_column(Boolean, default=False)
    cursed_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    tier: Mapped[int] = mapped_column(Integer, default=1)
    rarity: Mapped[str] = mapped_column(String, default="common")

    floor: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
