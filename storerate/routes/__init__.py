"""API routes."""

from fastapi import APIRouter

from storerate.routes import admin, auth, store_owner, stores, user

api_router = APIRouter()

# Sign-up, login, password
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Role-scoped endpoints
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
api_router.include_router(store_owner.router, prefix="/store", tags=["store"])

# Catalogue shared by every role
api_router.include_router(stores.router, prefix="/stores", tags=["stores"])
