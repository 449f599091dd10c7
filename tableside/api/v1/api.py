"""
V1 API router aggregator: wires all endpoint modules together.

Every route sits behind ``authenticate``: the bearer token (header or
cookie) is resolved once per request before any role guard runs.
"""

from fastapi import APIRouter, Depends

from tableside.api.v1.deps import authenticate
from tableside.api.v1.endpoints import menu, orders, payments, requests, token, users

api_router = APIRouter(dependencies=[Depends(authenticate)])

# Accounts and tokens
api_router.include_router(users.router)
api_router.include_router(token.router)

# Menu catalog
api_router.include_router(menu.router)

# Orders, order items, kitchen queue
api_router.include_router(orders.router)

# Payments
api_router.include_router(payments.router)

# Role-elevation requests
api_router.include_router(requests.router)
