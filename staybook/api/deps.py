"""Shared API dependencies — single import point for all routers.

Re-exports database session and caller identity dependencies so that router
modules can import everything they need from one place::

    from staybook.api.deps import get_db, get_caller
"""

from staybook.auth.dependencies import (
    get_caller,
    require_host,
    verify_cron_secret,
    verify_payment_webhook,
)
from staybook.database import get_db

__all__ = [
    "get_db",
    "get_caller",
    "require_host",
    "verify_cron_secret",
    "verify_payment_webhook",
]
