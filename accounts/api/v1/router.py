from fastapi import APIRouter

from accounts.api.v1.endpoints import auth, user

api_v1_router = APIRouter(prefix="/api/v1")

# Rate limits are declared per endpoint, the groups differ within a router
api_v1_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Auth"],
)

api_v1_router.include_router(
    user.router,
    prefix="/users",
    tags=["Users"],
)
