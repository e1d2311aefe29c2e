from fastapi import APIRouter

from app.features.discovery.routes.discovery import router as discovery_router
from app.features.scan.routes.audit import router as audit_router

api_router = APIRouter()

api_router.include_router(discovery_router)
api_router.include_router(audit_router)
