from fastapi import APIRouter
from hrdesk.routers import (
    auth, onboarding, roles, employees, time_logs, time_off, documents, settings
)

# Routers are aggregated here; main.py only imports this hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(onboarding.router, tags=["Onboarding"])
api_router.include_router(roles.router, tags=["Roles"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(time_logs.router, tags=["Time Clock"])
api_router.include_router(time_off.router, tags=["Time Off"])
api_router.include_router(documents.router, tags=["Documents"])
api_router.include_router(settings.router, tags=["Company Settings"])
