from fastapi import APIRouter
from portal.api.v1.endpoints import auth, students, health

api_router = APIRouter()

# Deep health check endpoints (use /health/ready for the load balancer)
api_router.include_router(health.router)

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
