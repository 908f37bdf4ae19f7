from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for the load balancer.

    Does not touch the database, so a slow store never marks the process dead.
    """

    return {"status": "ok"}
