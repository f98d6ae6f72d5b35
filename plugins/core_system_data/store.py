# plugins/core_system_data/store.py

import json
import logging
from pathlib import Path
from typing import Dict, Optional

import aiofiles

from .contracts import SystemDataInterface, SystemDataError

logger = logging.getLogger(__name__)


class FileSystemDataStore(SystemDataInterface):
    """
    把所有系统数据保存在 `<assets_dir>/system_data.json` 中。
    每次读取都从磁盘加载：CLI 进程和 Web 进程共享同一个文件，
    一方写入的 ChallengeToken 必须能被另一方立即看到。
    """
    def __init__(self, assets_base_dir: str):
        self._base_dir = Path(assets_base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._base_dir / "system_data.json"
        logger.info(f"FileSystemDataStore initialized. File: {self._file_path.resolve()}")

    @property
    def file_path(self) -> Path:
        return self._file_path

    async def _load(self) -> Dict[str, str]:
        if not self._file_path.is_file():
            return {}
        async with aiofiles.open(self._file_path, mode='r', encoding='utf-8') as f:
            content = await f.read()
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SystemDataError(f"System data file {self._file_path} is corrupt: {e}") from e
        if not isinstance(data, dict):
            raise SystemDataError(f"System data file {self._file_path} must contain a JSON object.")
        return data

    async def _save(self, data: Dict[str, str]) -> None:
        # 先写临时文件再替换，避免另一个进程读到写了一半的 JSON
        tmp_path = self._file_path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, mode='w', encoding='utf-8') as f:
            await f.write(json.dumps(data, indent=2, sort_keys=True))
        tmp_path.replace(self._file_path)

    async def get(self, key: str) -> Optional[str]:
        return (await self._load()).get(key)

    async def add(self, key: str, value: str) -> None:
        data = await self._load()
        if key in data:
            raise SystemDataError(f"System data key '{key}' already exists.")
        data[key] = value
        await self._save(data)
        logger.debug(f"Added system data key '{key}'.")

    async def update(self, key: str, value: str) -> None:
        data = await self._load()
        if key not in data:
            raise SystemDataError(f"System data key '{key}' does not exist.")
        data[key] = value
        await self._save(data)
        logger.debug(f"Updated system data key '{key}'.")

    async def delete(self, key: str) -> None:
        data = await self._load()
        if data.pop(key, None) is not None:
            await self._save(data)

    async def all(self) -> Dict[str, str]:
        return await self._load()
