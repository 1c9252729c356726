"""
Audit logging for authentication and order events.

Entries are single JSON lines on the "audit" logger so they can be shipped
to centralized logging separately from application logs.
Passwords and tokens are never logged.
"""
import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "pharmacist", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "pharmacist", "192.168.1.1", False, reason="Bad password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_session_rejected(path: str, ip_address: str, reason: str):
        """Request stopped by the session gate (missing, invalid or expired token)."""
        log_entry = {
            "timestamp": _now(),
            "event_type": "auth.session_rejected",
            "path": path,
            "ip_address": ip_address,
            "reason": reason,
        }
        audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_order_placed(
        order_id: int,
        username: Optional[str],
        patient_id: int,
        item_count: int,
        update_inventory: bool,
        unreserved_items: List[int],
    ):
        """
        Log a committed order.

        unreserved_items lists medicine ids whose inventory decrement matched
        no rows, so stock shortfalls remain traceable after the fact.
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "order.create",
            "order_id": order_id,
            "username": username,
            "patient_id": patient_id,
            "item_count": item_count,
            "update_inventory": update_inventory,
        }
        if unreserved_items:
            log_entry["unreserved_items"] = unreserved_items
            audit_logger.warning(json.dumps(log_entry))
        else:
            audit_logger.info(json.dumps(log_entry))
