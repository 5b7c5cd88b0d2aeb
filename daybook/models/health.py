# daybook/models/health.py
from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from daybook.db.database import Base

SYMPTOM_FIELDS = (
    "headache",
    "stomach",
    "period",
    "sleepless",
    "cold",
    "nausea",
    "hayfever",
    "depression",
    "tired",
    "other",
)


class Health(Base):
    __tablename__ = "health"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # "YYYY-MM-DD HH:MM:SS"; "... 00:00:00" means not recorded
    up_time: Mapped[str] = mapped_column(String(19), nullable=False, default="")
    bed_time: Mapped[str] = mapped_column(String(19), nullable=False, default="")
    body: Mapped[str] = mapped_column(String(10), nullable=False, default="")

    headache: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    stomach: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    period: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    sleepless: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    cold: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    nausea: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    hayfever: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    depression: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    tired: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    other: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))

    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("idx_health_user_date", "user_id", "date"),
    )
