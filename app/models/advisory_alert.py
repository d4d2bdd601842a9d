"""
AdvisoryAlert — warnings and nudges produced by the advisory engine.

The primary key is the rule's deterministic alert id (e.g. "drift-3"), so
re-evaluating never duplicates an alert and a dismissed alert stays
dismissed.

severity values: "insight" | "challenge" | "warning" | "opportunity"
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class AdvisoryAlert(Base):
    __tablename__ = "advisory_alerts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    pillar_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str | None] = mapped_column(String(128), nullable=True)
    dismissed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
