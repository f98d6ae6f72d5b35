# plugins/core_support_data/environment.py

import asyncio
import logging
import sys

from .contracts import EnvironmentInterface, OSFamily, PluginInfrastructureError

logger = logging.getLogger(__name__)


def detect_os_family(platform: str = sys.platform) -> OSFamily:
    platform = platform.lower()
    if platform.startswith("linux"):
        return OSFamily.LINUX
    if platform == "darwin":
        return OSFamily.DARWIN
    if "bsd" in platform:
        return OSFamily.BSD
    if platform.startswith(("sunos", "aix", "hp-ux")):
        return OSFamily.UNIX
    if platform.startswith(("win32", "cygwin", "msys")):
        return OSFamily.WINDOWS
    return OSFamily.OTHER


class LocalEnvironment(EnvironmentInterface):
    """当前进程所在主机的环境探针。"""
    def __init__(self, platform: str = sys.platform, command_timeout: float = 10.0):
        self._os_family = detect_os_family(platform)
        self._command_timeout = command_timeout

    @property
    def os_family(self) -> OSFamily:
        return self._os_family

    async def disk_partition(self, path: str) -> str:
        """返回 `df -P <path>` 输出最后一行的第一列（设备/分区名）。"""
        output = await self._run("df", "-P", path)
        lines = [line for line in output.splitlines() if line.strip()]
        if not lines:
            raise PluginInfrastructureError(f"'df -P {path}' produced no output.")
        return lines[-1].split()[0]

    async def _run(self, *command: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._command_timeout)
        except (OSError, asyncio.TimeoutError) as e:
            raise PluginInfrastructureError(f"Could not run '{' '.join(command)}': {e!r}") from e

        if process.returncode != 0:
            raise PluginInfrastructureError(
                f"'{' '.join(command)}' exited with {process.returncode}: {stderr.decode(errors='replace').strip()}"
            )
        return stdout.decode(errors='replace')
