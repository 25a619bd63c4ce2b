from fastapi import APIRouter

from scorecard.api.v1.endpoints import cron, kpis, organizations

api_router = APIRouter()
api_router.include_router(kpis.router, prefix="/kpis", tags=["kpis"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
