"""
FastAPI dependencies for applications that guard endpoints with the permission engine.

The host application authenticates requests and stores the subject id on
``request.state.user_id``; these helpers only authorize.

Usage:
    @router.put("/tasks/{task_id}", dependencies=[Depends(require_permission("task", "update"))])
    async def update_task(...):
        ...
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from authz.core.database import get_db
from authz.core.errors import DomainError, ErrorKind
from authz.domain.service import PermissionDomainService
from authz.repositories import build_permission_service

logger = logging.getLogger(__name__)


def get_permission_service(db: Session = Depends(get_db)) -> PermissionDomainService:
    """Permission service bound to the request's database session."""
    return build_permission_service(db)


def get_current_user_id(request: Request) -> str:
    """
    Subject id placed on the request by the authentication layer.

    Raises:
        HTTPException: 401 if the request is not authenticated
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return str(user_id)


async def enforce_permission(
    service: PermissionDomainService,
    user_id: str,
    resource: str,
    action: str,
    resource_ctx: Optional[Dict[str, Any]] = None,
    environment: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Enforce that a user may perform an action, raising if not.

    Raises:
        DomainError: PERMISSION_DENIED with the decision reason in details
    """
    result = await service.evaluate(user_id, resource, action, resource_ctx, environment)
    if not result.allowed:
        logger.warning(f"Permission denied: User {user_id} attempted {action} on {resource}")
        raise DomainError(
            ErrorKind.PERMISSION_DENIED, f"Permission denied: {resource}:{action} required"
        ).with_details("reason", result.reason).with_details("matched_rule", result.matched_rule)


def require_permission(
    resource: str,
    action: str,
    resource_ctx_getter: Optional[Callable[[Request], Dict[str, Any]]] = None,
):
    """
    FastAPI dependency factory for requiring a permission.

    Args:
        resource: The resource type
        action: The action name
        resource_ctx_getter: Optional callable building resource attributes from the request

    Returns:
        Dependency function returning the authorized user id
    """
    async def permission_dependency(
        request: Request,
        user_id: str = Depends(get_current_user_id),
        service: PermissionDomainService = Depends(get_permission_service),
    ) -> str:
        resource_ctx = resource_ctx_getter(request) if resource_ctx_getter else {}
        environment = {"client_ip": request.client.host} if request.client else {}
        try:
            await enforce_permission(service, user_id, resource, action, resource_ctx, environment)
        except DomainError as e:
            raise e.to_http_exception() from e
        return user_id

    return permission_dependency
