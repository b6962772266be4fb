"""
System maintenance endpoints: scoped reset and factory reset.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from shared.config.constants import Permissions, Roles
from shared.config.logging import audit_maintenance_event
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import require_permissions, require_roles
from shared.utils.exceptions import ConfirmationMismatchError
from shared.utils.schemas import FactoryResetRequest, SystemResetRequest
from pos_api.core.maintenance_lock import maintenance_guard
from pos_api.services.maintenance import factory_reset_system_data, reset_system_data

router = APIRouter(prefix="/api/system", tags=["system"])

can_reset = require_permissions(Permissions.SYSTEM_RESET)


@router.post("/reset")
def reset_system(
    body: SystemResetRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(can_reset),
) -> dict[str, Any]:
    """Delete transactions, or transactions plus master data."""
    with maintenance_guard("reset"):
        result = reset_system_data(db, body.scope)
    audit_maintenance_event(
        "RESET",
        user_id=user.get("sub"),
        email=user.get("email"),
        scope=body.scope,
        total_deleted=result.total_deleted,
    )
    return {"reset": True, "scope": body.scope, "deleted": result.deleted}


@router.post("/factory-reset")
def factory_reset(
    body: FactoryResetRequest,
    response: Response,
    db: Session = Depends(get_db),
    user: dict = Depends(can_reset),
) -> dict[str, Any]:
    """
    Wipe everything and send the installation back to first-run setup.

    Requires the OWNER role and the exact confirmation phrase.
    """
    require_roles(user, [Roles.OWNER])
    if body.confirm_text.strip() != settings.factory_reset_phrase:
        audit_maintenance_event(
            "FACTORY_RESET",
            user_id=user.get("sub"),
            email=user.get("email"),
            success=False,
            reason="confirmation_mismatch",
        )
        raise ConfirmationMismatchError(user_id=user.get("sub"))

    with maintenance_guard("factory_reset"):
        result = factory_reset_system_data(db)
    audit_maintenance_event(
        "FACTORY_RESET",
        user_id=user.get("sub"),
        email=user.get("email"),
        total_deleted=result.total_deleted,
    )

    # Every session row is gone; drop the caller's cookie too
    response.delete_cookie(settings.session_cookie_name)
    return {"reset": True}
