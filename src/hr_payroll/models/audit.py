"""Audit trail model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.errors import ImmutableRecordError
from hr_payroll.models.base import Base, utcnow


class AuditLogEntry(Base):
    """One audit trail entry.

    Rows are only ever inserted; the ``entry_id`` sequence gives write order.
    """

    __tablename__ = "audit_log_entry"

    entry_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    username: Mapped[str] = mapped_column(String, nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    detail: Mapped[str] = mapped_column(Text, nullable=False, default="")
    entity_kind: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("idx_audit_log_entity", "entity_kind", "entity_id"),
        Index("idx_audit_log_action", "action"),
    )


@event.listens_for(AuditLogEntry, "before_update")
@event.listens_for(AuditLogEntry, "before_delete")
def _refuse_audit_change(mapper: Any, connection: Any, target: Any) -> None:
    raise ImmutableRecordError("Audit entries are append-only")
