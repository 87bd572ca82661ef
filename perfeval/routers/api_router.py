from fastapi import APIRouter
from perfeval.routers import evaluations, employees, admin

# Routers are aggregated here; main.py only imports this hub.
api_router = APIRouter()

api_router.include_router(evaluations.router, tags=["Evaluations"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(admin.router, tags=["Administration"])
