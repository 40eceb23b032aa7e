from fastapi import APIRouter

from modelcheck.api.routes import discovery, validation

api_router = APIRouter()
api_router.include_router(discovery.router, tags=["discovery"])
api_router.include_router(validation.router, tags=["validation"])
