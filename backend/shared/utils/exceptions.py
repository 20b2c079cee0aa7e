"""
HTTP-aware domain errors.

Services raise these directly; FastAPI renders them as {"detail": ...}
with the class's status code. Each error is logged once, when raised,
with whatever keyword context the caller passes:

    raise NotFoundError("Menu item", item_id)
    raise ConflictError("Order already assigned to another user.", order_id=7)
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    status_code_default: int = status.HTTP_400_BAD_REQUEST
    log_level: str = "warning"

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        code = status_code or self.status_code_default
        getattr(logger, self.log_level)(detail, status_code=code, **log_context)
        super().__init__(status_code=code, detail=detail, headers=headers)


# 404


class NotFoundError(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        detail = f"{entity} not found" if entity_id is None else f"{entity} with ID {entity_id} not found"
        super().__init__(detail, entity=entity, entity_id=entity_id, **log_context)


class NoActiveSessionError(NotFoundError):
    log_level = "info"

    def __init__(self, **log_context: Any):
        AppException.__init__(self, "Active session not found.", **log_context)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class OrderNotInActiveSessionError(AppException):
    """The order exists but belongs to a session that is no longer active."""

    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: int, **log_context: Any):
        super().__init__("Order not found in active session.", order_id=order_id, **log_context)


# 401 / 403


class UnauthenticatedError(AppException):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    log_level = "info"

    def __init__(self, detail: str = "Unauthorized", **log_context: Any):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"}, **log_context)


class ForbiddenError(AppException):
    """
    403. Pass the attempted action for a generic message, or a full
    detail when the caller should see something specific:

        raise ForbiddenError("manage sessions")
        raise ForbiddenError(detail="You are not assigned to this order.")
    """

    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, action: str | None = None, detail: str | None = None, **log_context: Any):
        if detail is None:
            detail = f"Not allowed to {action}" if action else "Access denied"
        super().__init__(detail, action=action, **log_context)


# 400 / 409


class ValidationError(AppException):
    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, **log_context)


class InvalidTransitionError(ValidationError):
    """Backward or skipped status move when strict transitions are on."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        super().__init__(
            f"Invalid transition from '{from_status}' to '{to_status}' for {entity}",
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


class ConflictError(AppException):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, **log_context)
