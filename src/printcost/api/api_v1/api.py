from fastapi import APIRouter

from src.printcost.api.api_v1.endpoints import admin, auth, sheets, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(sheets.router, prefix="/sheets", tags=["sheets"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
