from fastapi import APIRouter

from reposync.dependencies.api.dependency_router import router as dependency_router

router = APIRouter()

router.include_router(
    dependency_router, prefix="/repositories", tags=["repositories"]
)
