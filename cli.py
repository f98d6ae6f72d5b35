# cli.py
import asyncio
import json
from itertools import groupby
from typing import Optional

import typer
from dotenv import load_dotenv

from backend.app import build_container
from plugins.core_support_data.contracts import CollectionResult, FindingStatus

app = typer.Typer(name="ticketry", help="Ticketry Command-Line Interface")
support_data_app = typer.Typer(name="support-data", help="Collect system support data.")
app.add_typer(support_data_app)

STATUS_COLORS = {
    FindingStatus.OK: typer.colors.GREEN,
    FindingStatus.INFORMATION: typer.colors.BLUE,
    FindingStatus.WARNING: typer.colors.YELLOW,
    FindingStatus.PROBLEM: typer.colors.RED,
    FindingStatus.UNKNOWN: typer.colors.MAGENTA,
}


async def _collect(use_cache: bool, timeout: Optional[float]) -> CollectionResult:
    container, hook_manager = await build_container()
    try:
        collector = container.resolve("support_data_collector")
        # CLI 不在请求上下文中，collect() 会走远程回退，由运行中的 Web 应用完成收集
        return await collector.collect(use_cache=use_cache, web_timeout=timeout)
    finally:
        await hook_manager.trigger('app_shutdown')


def _print_result(result: CollectionResult) -> None:
    # groupby 只合并相邻项，保持插件的执行顺序
    for display_path, findings in groupby(result.findings, key=lambda f: f.display_path):
        typer.secho(f"\n{display_path}", bold=True)
        for finding in findings:
            status = typer.style(f"[{finding.status.value}]", fg=STATUS_COLORS[finding.status])
            line = f"  {status} {finding.label}: {finding.value}"
            if finding.message:
                line += f" ({finding.message})"
            typer.echo(line)


@support_data_app.command("collect")
def collect(
    use_cache: bool = typer.Option(False, "--use-cache/--no-cache", help="Return a cached result if one is still valid."),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Timeout in seconds for the web request."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw CollectionResult as JSON."),
):
    """
    Collects support data via the running web application and prints the findings.
    """
    load_dotenv()
    result = asyncio.run(_collect(use_cache, timeout))

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode='json'), indent=2, ensure_ascii=False))
    elif result.success:
        _print_result(result)

    if not result.success:
        typer.secho(f"🔥 Support data collection failed: {result.error_message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not as_json:
        typer.secho(f"\n✅ {len(result.findings)} finding(s) collected.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
