"""HTTP routers, all mounted under /api."""

from paysheet.api.routes import auth, health, reports, transactions, users

ROUTERS = [
    health.router,
    auth.router,
    transactions.router,
    reports.router,
    users.router,
]

__all__ = ["ROUTERS"]
