from fastapi import APIRouter, Depends

from page_translator.api.deps import Workspace, get_workspace

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/llm/health")
def llm_health(ws: Workspace = Depends(get_workspace)):
    """Reports whether a model API key is configured. Makes no remote call."""
    return {"status": "ok", "configured": ws.controller.translator.client.is_configured()}
