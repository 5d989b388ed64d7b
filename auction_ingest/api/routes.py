# auction_ingest/api/routes.py
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, status
from ..config import settings
from ..ingest import IngestionOrchestrator, RunStatus, build_orchestrator
from ..utils import logger

router = APIRouter()


def get_orchestrator() -> IngestionOrchestrator:
    return build_orchestrator()


def get_admin_token():
    return settings.admin_token


def require_operator(
    authorization: str | None = Header(default=None),
    admin_token: str | None = Depends(get_admin_token),
):
    if not admin_token:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail="Manual ingestion trigger is disabled")
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Authorization must be: Bearer <token>")
    if not secrets.compare_digest(token.strip().encode(), admin_token.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Operator role required")


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/admin/ingest/run", dependencies=[Depends(require_operator)])
def trigger_ingest(orchestrator: IngestionOrchestrator = Depends(get_orchestrator)):
    logger.info("Manual ingestion run requested")
    try:
        summary = orchestrator.run()
    except Exception as e:
        logger.exception("Manual ingestion run failed: %s", e)
        raise HTTPException(status_code=500, detail="Ingestion run failed; check the logs")

    if summary.aborted:
        raise HTTPException(status_code=500, detail=f"Ingestion run aborted: {summary.error}")

    if summary.status is RunStatus.SKIPPED:
        message = "Another ingestion run is in progress; skipped"
    else:
        message = "Ingestion run finished"
    return {
        "status": summary.status.value,
        "message": message,
        "pages_attempted": summary.pages_attempted,
        "succeeded": summary.succeeded,
        "failed": summary.failed,
    }
