from fastapi import APIRouter
from app.api.v1 import openapi

router = APIRouter()

router.include_router(openapi.router, prefix="/api/v1")


@router.get("/")
async def root():
    return {
        "message": "Template Publisher API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@router.get("/health")
async def health():
    return {"status": "healthy"}
