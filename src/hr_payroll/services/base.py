"""Shared plumbing for session-backed services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from hr_payroll.errors import PayrollError, PermissionDeniedError
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation, authorize

logger = logging.getLogger(__name__)


def authorize_audited(
    audit: AuditService,
    actor: Actor,
    operation: Operation,
    subject_employee_id: UUID | None = None,
    entity_kind: str | None = None,
    entity_id: Any = None,
) -> None:
    """Run the authorization gate, auditing any denial before re-raising."""
    try:
        authorize(actor, operation, subject_employee_id)
    except PermissionDeniedError as e:
        logger.warning("Permission denied: %s", e)
        audit.record(actor, "PermissionDenied", str(e), entity_kind, entity_id)
        raise


class AuditedService:
    """Base for services that hold a session and write to the audit trail."""

    def __init__(self, session: Session, audit: AuditService | None = None):
        self.session = session
        self.audit = audit or AuditService()

    def _authorize(
        self,
        actor: Actor,
        operation: Operation,
        subject_employee_id: UUID | None = None,
        entity_kind: str | None = None,
        entity_id: Any = None,
    ) -> None:
        authorize_audited(
            self.audit, actor, operation, subject_employee_id, entity_kind, entity_id
        )

    @contextmanager
    def _audit_failure(
        self,
        actor: Actor,
        action: str,
        entity_kind: str | None = None,
        entity_id: Any = None,
    ) -> Iterator[None]:
        """Record ``action`` for any domain error raised inside the block.

        Permission denials are left alone; the gate has already recorded them.
        """
        try:
            yield
        except PermissionDeniedError:
            raise
        except PayrollError as e:
            self.audit.record(actor, action, str(e), entity_kind, entity_id)
            raise
