"""Append-only audit trail."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.database import init_db
from hr_payroll.models import AuditLogEntry
from hr_payroll.services.authorization import Actor

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"


class AuditService:
    """Writes audit entries to the ``audit_log_entry`` table.

    Every entry is written in its own short-lived session, so it never joins
    or commits the caller's unit of work. Recording is fire-and-forget: a
    failed write is logged and never fails the business operation that
    triggered it.

    Usage:
        audit = AuditService(session_factory)
        audit.record(actor, "LeaveApproved", "3 day(s) debited", "LeaveRequest", request_id)

        for entry in audit.entries(entity_kind="LeaveRequest", entity_id=request_id):
            print(entry.action)
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            _, self._session_factory = init_db()
        return self._session_factory

    def record(
        self,
        actor: Actor | str,
        action: str,
        detail: str,
        entity_kind: str | None = None,
        entity_id: Any = None,
    ) -> None:
        """Append one entry to the trail."""
        username = actor.username if isinstance(actor, Actor) else actor
        try:
            with self.session_factory() as session:
                session.add(
                    AuditLogEntry(
                        username=username,
                        action=action,
                        detail=detail,
                        entity_kind=entity_kind,
                        entity_id=str(entity_id) if entity_id is not None else None,
                    )
                )
                session.commit()
        except Exception:
            logger.exception("Failed to write audit entry %s for %s", action, username)

    def entries(
        self,
        entity_kind: str | None = None,
        entity_id: Any = None,
        action: str | None = None,
    ) -> list[AuditLogEntry]:
        """Read the trail back in write order, optionally filtered."""
        stmt = select(AuditLogEntry).order_by(AuditLogEntry.entry_id)
        if entity_kind is not None:
            stmt = stmt.where(AuditLogEntry.entity_kind == entity_kind)
        if entity_id is not None:
            stmt = stmt.where(AuditLogEntry.entity_id == str(entity_id))
        if action is not None:
            stmt = stmt.where(AuditLogEntry.action == action)

        with self.session_factory() as session:
            return list(session.execute(stmt).scalars().all())
