# plugins/core_support_data/aggregator.py

from typing import List, Sequence, Tuple

from .contracts import CollectionResult, Finding


def aggregate_results(plugin_results: Sequence[Tuple[str, CollectionResult]]) -> CollectionResult:
    """
    按插件顺序拼接各插件的 findings（插件内部顺序保持不变）。
    遇到第一个失败的插件立即返回失败，不合并任何部分结果：一次收集要么全部成功，要么失败。
    """
    findings: List[Finding] = []
    for identifier, result in plugin_results:
        if not result.success:
            return CollectionResult.failure(
                f"Error during execution of {identifier}: {result.error_message}"
            )
        findings.extend(result.findings)
    return CollectionResult.ok(findings)
