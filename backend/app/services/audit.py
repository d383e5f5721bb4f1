"""Audit trail for billing and destructive actions, written to the ``app.audit`` logger."""

import logging
import uuid
from typing import Any

logger = logging.getLogger("app.audit")


def _log(
    level: int,
    action: str,
    resource: str,
    *,
    user_id: uuid.UUID | str | None,
    resource_id: uuid.UUID | str | None,
    error: str | None,
    details: dict[str, Any],
) -> None:
    logger.log(
        level,
        "action=%s resource=%s resource_id=%s user_id=%s success=%s error=%s details=%s",
        action,
        resource,
        resource_id,
        user_id,
        error is None,
        error,
        details,
    )


def log_success(
    action: str,
    resource: str,
    *,
    user_id: uuid.UUID | str | None = None,
    resource_id: uuid.UUID | str | None = None,
    **details: Any,
) -> None:
    _log(logging.INFO, action, resource, user_id=user_id, resource_id=resource_id, error=None, details=details)


def log_failure(
    action: str,
    resource: str,
    error: str,
    *,
    user_id: uuid.UUID | str | None = None,
    resource_id: uuid.UUID | str | None = None,
    **details: Any,
) -> None:
    _log(logging.WARNING, action, resource, user_id=user_id, resource_id=resource_id, error=error, details=details)
