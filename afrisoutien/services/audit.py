"""
Admin audit trail.

Entries are kept in a bounded in-memory ring and mirrored to the log
(INFO on success, WARNING on failure).  The store is created once in
the app factory and reached through ``get_audit_log``; nothing here is
persisted across restarts.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import Request

from afrisoutien.models.user import User

logger = logging.getLogger(__name__)

MAX_ENTRIES = 1000


class AuditAction(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    LIST_USERS = "list_users"
    CHANGE_USER_ROLE = "change_user_role"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    LIST_CAMPAIGNS = "list_campaigns"
    CHANGE_CAMPAIGN_STATUS = "change_campaign_status"
    DELETE_CAMPAIGN = "delete_campaign"
    LIST_DONATIONS = "list_donations"
    PUBLISH_MATERIAL_DONATION = "publish_material_donation"
    REJECT_MATERIAL_DONATION = "reject_material_donation"
    LIST_ORDERS = "list_orders"
    CHANGE_ORDER_STATUS = "change_order_status"
    VIEW_REPORT = "view_report"
    VIEW_CONTENT = "view_content"
    UPDATE_CONTENT = "update_content"
    VIEW_LOGS = "view_logs"
    ADMIN_LOGIN_SUCCESS = "admin_login_success"
    ADMIN_LOGIN_FAILED = "admin_login_failed"
    ADMIN_ACCESS_DENIED = "admin_access_denied"


SECURITY_ACTIONS = frozenset(
    {
        AuditAction.ADMIN_LOGIN_FAILED,
        AuditAction.ADMIN_ACCESS_DENIED,
        AuditAction.DELETE_USER,
        AuditAction.CHANGE_USER_ROLE,
    }
)


@dataclass
class AuditEntry:
    action: AuditAction
    ip_address: str
    user_agent: str
    success: bool = True
    user_id: int | None = None
    user_email: str | None = None
    resource: str | None = None
    resource_id: int | None = None
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


def client_ip(request: Request) -> str:
    # Proxy headers are trusted only through uvicorn --forwarded-allow-ips
    if request.client:
        return request.client.host
    return "unknown"


class AuditLog:
    def __init__(self, max_entries: int = MAX_ENTRIES) -> None:
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)

    def record(
        self,
        request: Request,
        action: AuditAction,
        *,
        user: User | None = None,
        success: bool = True,
        resource: str | None = None,
        resource_id: int | None = None,
        details: dict[str, Any] | None = None,
        user_email: str | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            action=action,
            ip_address=client_ip(request),
            user_agent=request.headers.get("User-Agent", "unknown"),
            success=success,
            user_id=user.id if user is not None else None,
            user_email=user.email if user is not None else user_email,
            resource=resource,
            resource_id=resource_id,
            details=details,
        )
        self._entries.append(entry)

        logger.log(
            logging.INFO if success else logging.WARNING,
            "[ADMIN AUDIT] %s %s user=%s ip=%s resource=%s%s details=%s",
            "SUCCESS" if success else "FAILED",
            action.value,
            entry.user_email or "anonymous",
            entry.ip_address,
            resource or "none",
            f"({resource_id})" if resource_id is not None else "",
            details or "none",
        )
        return entry

    def latest(self, limit: int = 100) -> list[AuditEntry]:
        return list(reversed(self._entries))[:limit]

    def by_user(self, user_id: int, limit: int = 50) -> list[AuditEntry]:
        return [e for e in reversed(self._entries) if e.user_id == user_id][:limit]

    def security(self, limit: int = 50) -> list[AuditEntry]:
        return [
            e
            for e in reversed(self._entries)
            if e.action in SECURITY_ACTIONS or not e.success
        ][:limit]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def get_audit_log(request: Request) -> AuditLog:
    """FastAPI dependency — the app-wide audit store."""
    return request.app.state.audit_log
