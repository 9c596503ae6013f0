"""
Top-level router of the journal bounded context.

Collects the per-feature routers. Every route except sign-up and
sign-in requires a bearer token.
"""

from fastapi import APIRouter

from tradejournal.interfaces.journal.routers import (
    analytics,
    auth,
    intraday,
    portfolio,
    profile,
    stocks,
    tools,
)

router = APIRouter()

for _module in (auth, profile, intraday, portfolio, analytics, stocks, tools):
    router.include_router(_module.router)
