# plugins/core_support_data/challenge.py

import logging
import secrets
from typing import Any

from plugins.core_system_data.contracts import SystemDataInterface
from .contracts import CHALLENGE_TOKEN_KEY, ChallengeTokenStoreInterface

logger = logging.getLogger(__name__)

CHALLENGE_TOKEN_LENGTH = 32


def generate_challenge_token() -> str:
    """32 个小写十六进制字符。"""
    return secrets.token_hex(CHALLENGE_TOKEN_LENGTH // 2)


class ChallengeTokenStore(ChallengeTokenStoreInterface):
    """
    管理远程回退使用的 ChallengeToken。
    令牌没有过期时间，每次 refresh 都会覆盖上一个。
    """
    def __init__(self, system_data: SystemDataInterface):
        self._system_data = system_data

    async def refresh(self) -> str:
        token = generate_challenge_token()
        if await self._system_data.get(CHALLENGE_TOKEN_KEY) is not None:
            await self._system_data.update(CHALLENGE_TOKEN_KEY, token)
        else:
            await self._system_data.add(CHALLENGE_TOKEN_KEY, token)
        logger.debug("Support data challenge token refreshed.")
        return token

    async def verify(self, candidate: Any) -> bool:
        if not isinstance(candidate, str) or not candidate:
            return False
        expected = await self._system_data.get(CHALLENGE_TOKEN_KEY)
        if not expected:
            return False
        return secrets.compare_digest(candidate.encode(), expected.encode())
