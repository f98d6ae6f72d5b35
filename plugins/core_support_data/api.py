# plugins/core_support_data/api.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException

from backend.core.dependencies import Service
from .contracts import (
    PUBLIC_ACTION,
    ChallengeTokenStoreInterface,
    CollectionResult,
    SupportDataCollectorInterface,
)

logger = logging.getLogger(__name__)

# --- 路由器 1: 给管理端使用的 API ---
support_data_router = APIRouter(
    prefix="/api/support-data",
    tags=["System", "Support Data"]
)


@support_data_router.get("", response_model=CollectionResult, summary="Collect system support data")
async def get_support_data(
    use_cache: bool = True,
    collector: SupportDataCollectorInterface = Depends(Service("support_data_collector"))
):
    """
    Runs every enabled support data plugin in-process (this request is the web
    context) and returns the aggregated findings, or the cached result.
    """
    return await collector.collect(use_cache=use_cache)


# --- 路由器 2: 远程回退调用的免登录端点 ---
def create_public_router(script_alias: str) -> APIRouter:
    """
    public 端点的路径取决于配置中的 script_alias，因此在收集路由时才创建。
    """
    public_router = APIRouter(tags=["Public"])

    @public_router.post(f"/{script_alias}public.pl", summary="Public support data collector endpoint")
    async def public_support_data_collector(
        Action: Optional[str] = Form(None),
        ChallengeToken: Optional[str] = Form(None),
        collector: SupportDataCollectorInterface = Depends(Service("support_data_collector")),
        challenge_tokens: ChallengeTokenStoreInterface = Depends(Service("support_data_challenge_tokens")),
    ):
        if Action != PUBLIC_ACTION:
            raise HTTPException(status_code=400, detail=f"Unknown action '{Action}'.")

        if not await challenge_tokens.verify(ChallengeToken):
            logger.warning("Rejected public support data request with an invalid challenge token.")
            raise HTTPException(status_code=403, detail="Invalid challenge token.")

        # 即使收集失败也返回 200：调用方解析 JSON 中的 success / error_message
        result = await collector.collect(use_cache=False)
        return result.model_dump(mode='json')

    return public_router
