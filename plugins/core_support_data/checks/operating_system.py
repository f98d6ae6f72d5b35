# plugins/core_support_data/checks/operating_system.py
import logging

from ..contracts import CollectionResult, PluginInfrastructureError
from ..plugin_base import SupportDataPlugin

logger = logging.getLogger(__name__)


class DiskPartitionCheck(SupportDataPlugin):
    """
    报告应用主目录所在的磁盘分区（仅限类 Unix 系统）。
    `df` 不可用时只记录警告并报告空值，不让整次收集失败。
    """
    display_path = "Operating System"

    async def run(self) -> CollectionResult:
        if not self.environment.is_unix_like:
            return self.get_results()

        try:
            partition = await self.environment.disk_partition(self.config.home)
        except PluginInfrastructureError as e:
            logger.warning(f"Could not determine the disk partition of '{self.config.home}': {e}")
            partition = ""
        self.add_result_information(label="Ticketry Disk Partition", value=partition)
        return self.get_results()
