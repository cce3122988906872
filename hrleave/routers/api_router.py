from fastapi import APIRouter
from hrleave.routers import admin, auth, leave_balance, leave_quota, leave_request, year_end

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(year_end.router, tags=["Year-End Processing"])
api_router.include_router(leave_balance.router, tags=["Leave Balances"])
api_router.include_router(leave_request.router, tags=["Leave Requests"])
api_router.include_router(leave_quota.router, tags=["Leave Quotas"])
api_router.include_router(admin.router, tags=["Administration"])
