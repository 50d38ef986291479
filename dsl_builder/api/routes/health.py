from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """Liveness probe; the service holds no external dependencies to check."""
    return {"ok": True}
