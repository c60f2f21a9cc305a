"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: The authentication gate is applied at the include_router level
using FastAPI's dependencies parameter, so it runs before every handler
behind it. It does not reject anonymous callers — routes that need a
user declare get_current_user (or check the Identity via the guard).
Health stays outside the gate so probes never need credentials.
"""

from fastapi import APIRouter, Depends

from fitlog.api.health import router as health_router
from fitlog.api.tokens import router as tokens_router
from fitlog.api.users import router as users_router
from fitlog.api.workouts import router as workouts_router
from fitlog.auth.dependencies import authenticate

# Every routed request resolves its identity first
_gate = [Depends(authenticate)]

api_router = APIRouter(prefix="/api/v1")

# Open, no identity resolution
api_router.include_router(health_router, tags=["health"])

# Behind the authentication gate
api_router.include_router(users_router, tags=["users"], dependencies=_gate)
api_router.include_router(tokens_router, tags=["tokens"], dependencies=_gate)
api_router.include_router(workouts_router, tags=["workouts"], dependencies=_gate)
