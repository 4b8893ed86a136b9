"""
Main API router aggregator
"""
from fastapi import APIRouter

from medlegal.api.v1.endpoints import auth, cases, health, reports, sections

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(reports.router, prefix="/cases", tags=["Reports"])
api_router.include_router(sections.router, tags=["Sections"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
