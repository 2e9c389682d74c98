from fastapi import APIRouter

from app.ai.config import load_parsing_strategy

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status and configured provider chains.")
def health_check():
    return {
        "status": "healthy",
        "providers": {
            "resume": list(load_parsing_strategy("resume").provider_ids),
            "job": list(load_parsing_strategy("job").provider_ids),
        },
    }
