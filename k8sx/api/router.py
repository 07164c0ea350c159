from fastapi import APIRouter

from k8sx import __version__
from k8sx.api.v1 import k8s

router = APIRouter()

router.include_router(k8s.router, prefix="/api/v1")

@router.get("/")
async def root():
    return {
        "message": "k8sx API",
        "version": __version__,
        "docs": "/docs",
        "search": {
            "auto": "/api/v1/k8s/search?q=",
            "ip": "/api/v1/k8s/search/ip?ip=",
            "name": "/api/v1/k8s/search/name?name="
        }
    }

@router.get("/health")
async def health():
    return {"status": "healthy"}
