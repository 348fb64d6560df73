"""FastAPI dependencies for dependency injection."""

from collections.abc import Generator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from hr_payroll.database import init_db
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Role


def get_db_session() -> Generator[Session, None, None]:
    """Get database session dependency."""
    _, factory = init_db()
    session = factory()
    try:
        yield session
    finally:
        session.close()


def get_audit_service() -> AuditService:
    return AuditService()


def get_actor(
    x_actor_username: Annotated[str | None, Header()] = None,
    x_actor_role: Annotated[str | None, Header()] = None,
    x_employee_id: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting user from identity headers set by the upstream gateway."""
    if not x_actor_username or not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Username and X-Actor-Role headers are required",
        )
    try:
        role = Role(x_actor_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role '{x_actor_role}'",
        )

    employee_id = None
    if x_employee_id:
        try:
            employee_id = UUID(x_employee_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid X-Employee-Id format",
            )

    return Actor(username=x_actor_username, role=role, employee_id=employee_id)


# Type aliases for cleaner dependency injection
DbSession = Annotated[Session, Depends(get_db_session)]
Audit = Annotated[AuditService, Depends(get_audit_service)]
CurrentActor = Annotated[Actor, Depends(get_actor)]
