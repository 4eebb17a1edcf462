# services/api/routers/admin_config.py
from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from core.auth import require_admin
from core.config_service import ConfigService
from core.errors import InvalidConfigKeyError
from core.validation import parse_page_key
from schemas.config import ConfigReadResponse, ConfigUpdate, ConfigUpdateResponse

logger = logging.getLogger(__name__)

# Mounted under Settings.admin_base_path by main.create_app
router = APIRouter(tags=["admin"], dependencies=[Depends(require_admin)])


def get_config_service(request: Request) -> ConfigService:
    service = getattr(request.app.state, "config_service", None)
    if service is None:
        raise HTTPException(
            status_code=500,
            detail="Config service not configured on app.state.config_service",
        )
    return service


# ---- DI alias ----
Service = Annotated[ConfigService, Depends(get_config_service)]


@router.get("/config", response_model=ConfigReadResponse)
async def read_config(
    service: Service,
    file: Optional[str] = Query(None, description="Page key, defaults to home"),
):
    """
    Return the current config document for a page.

    Local disk is tried first; GitHub is the fallback when it is configured.
    """
    try:
        key = parse_page_key(file)
    except InvalidConfigKeyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        data = await service.read(key)
    except Exception as e:
        logger.exception("Failed to read config")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Failed to read config",
        )

    return ConfigReadResponse(config=data)


@router.put("/config", response_model=ConfigUpdateResponse)
async def update_config(body: ConfigUpdate, service: Service):
    """
    Replace the config document for a page.

    With commit=true the document goes to GitHub first and the local copy is
    refreshed best-effort; otherwise it is only written to local disk.
    """
    try:
        committed = await service.write(
            body.file,
            body.content,
            commit=body.commit,
            commit_message=body.commit_message,
        )
    except Exception as e:
        logger.exception("Failed to update config")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Failed to update config",
        )

    return ConfigUpdateResponse(ok=True, committed=committed)
