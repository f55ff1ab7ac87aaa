"""
Audit Logger

DESIGN DECISION: Every mutation and every login attempt is logged.
This provides:
1. Traceability of who changed which row
2. Debugging capability when the sheet and the API disagree
3. A record of failed logins

Audit lines go to the structured local log only. The spreadsheet is
the system of record for data, not for history.
"""

import logging
import sys
from typing import Any, Optional

import structlog


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of stdlib logging.

    Replaces the root handlers, so only the application entry point
    (``create_app``) calls this. Safe to call more than once; the last
    call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    _configure_structlog(json_output)


def _configure_structlog(json_output: bool = True) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Importing the package only sets up structlog; stdlib handlers belong
# to the host process until configure_logging() is called.
_configure_structlog()


class AuditLogger:
    """
    Central audit logging service.

    One method per auditable action so call sites stay declarative.
    """

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger("paysheet.audit")

    def log(self, event: str, severity: str = "info", **details: Any) -> None:
        """Emit one audit line."""
        if severity == "error":
            self._logger.error(event, audit=True, **details)
        elif severity == "warning":
            self._logger.warning(event, audit=True, **details)
        else:
            self._logger.info(event, audit=True, **details)

    # Authentication

    def login_succeeded(self, user_id: str, email: str) -> None:
        self.log("login_succeeded", user_id=user_id, email=email)

    def login_failed(self, email: str, reason: str) -> None:
        self.log("login_failed", severity="warning", email=email, reason=reason)

    def user_registered(self, user_id: str, email: str) -> None:
        self.log("user_registered", user_id=user_id, email=email)

    # User administration

    def user_created(self, actor_id: Optional[str], user_id: str, role: str) -> None:
        self.log("user_created", actor_id=actor_id, user_id=user_id, role=role)

    def user_updated(self, actor_id: str, user_id: str, fields: list[str]) -> None:
        self.log("user_updated", actor_id=actor_id, user_id=user_id, fields=fields)

    def user_deleted(self, actor_id: str, user_id: str) -> None:
        self.log("user_deleted", actor_id=actor_id, user_id=user_id)

    # Transactions

    def transaction_created(
        self,
        actor_id: str,
        transaction_id: str,
        tx_type: str,
        amount: str,
    ) -> None:
        self.log(
            "transaction_created",
            actor_id=actor_id,
            transaction_id=transaction_id,
            type=tx_type,
            amount=amount,
        )

    def transaction_updated(
        self,
        actor_id: str,
        transaction_id: str,
        fields: list[str],
    ) -> None:
        self.log(
            "transaction_updated",
            actor_id=actor_id,
            transaction_id=transaction_id,
            fields=fields,
        )

    def transaction_deleted(self, actor_id: str, transaction_id: str) -> None:
        self.log(
            "transaction_deleted",
            actor_id=actor_id,
            transaction_id=transaction_id,
        )
