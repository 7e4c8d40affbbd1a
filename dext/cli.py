"""
Command line entry point.

Usage:
  dext query "calc 2+2"
  dext details "calc 2+2" --index 0
  dext serve            # JSON lines on stdin/stdout
  dext clear-cache
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from dext.app import DextApp
from dext.errors import DextError
from dext.ipc import QueueSender
from dext.utils.helpers import setup_logging

app = typer.Typer(add_completion=False, help="Keyword-routed launcher query engine.")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Settings TOML file"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Set log level"),
) -> None:
    setup_logging(log_level)
    ctx.obj = config


@app.command()
def query(
    ctx: typer.Context,
    phrase: str = typer.Argument(..., help="Phrase as typed in the launcher"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Run one ranked query and print the results."""
    async def run():
        dext = DextApp.create(config_path=ctx.obj)
        try:
            return await dext.query(phrase)
        finally:
            await dext.close()

    results = asyncio.run(run())
    if as_json:
        typer.echo(json.dumps([r.to_dict() for r in results], default=str, indent=2))
        return

    for i, item in enumerate(results):
        plugin = item.plugin.name if item.plugin else "?"
        typer.echo(f"{i:>2}  {item.title}  [{plugin}]")
        if item.subtitle:
            typer.echo(f"    {item.subtitle}")


@app.command()
def details(
    ctx: typer.Context,
    phrase: str = typer.Argument(..., help="Phrase as typed in the launcher"),
    index: int = typer.Option(0, "--index", "-i", help="Result to describe"),
) -> None:
    """Resolve detail content for one result of a query."""
    async def run():
        dext = DextApp.create(config_path=ctx.obj)
        try:
            results = await dext.query(phrase)
            if not 0 <= index < len(results):
                raise typer.BadParameter(f"No result at index {index} ({len(results)} results)")
            return await dext.details(results[index])
        finally:
            await dext.close()

    typer.echo(asyncio.run(run()))


@app.command()
def serve(ctx: typer.Context) -> None:
    """Read {"kind", "payload"} JSON lines on stdin, write replies to stdout."""
    asyncio.run(_serve(ctx.obj))


@app.command("clear-cache")
def clear_cache(ctx: typer.Context) -> None:
    """Drop every cached item detail."""
    dext = DextApp.create(config_path=ctx.obj)
    dext.cache.clear()
    dext.cache.close()
    typer.echo("Detail cache cleared")


async def _serve(config_path: Optional[Path]) -> None:
    dext = DextApp.create(config_path=config_path)
    sender = QueueSender()
    writer = asyncio.create_task(_write_replies(sender.queue))
    loop = asyncio.get_running_loop()

    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            try:
                message = json.loads(line)
                await dext.channel.dispatch(message["kind"], message.get("payload"), sender)
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Ignoring malformed message: {e}")
            except DextError as e:
                logger.warning(str(e))
    finally:
        await dext.flush()
        await dext.close()
        await sender.queue.join()
        writer.cancel()


async def _write_replies(queue: asyncio.Queue) -> None:
    while True:
        kind, payload = await queue.get()
        sys.stdout.write(json.dumps({"kind": kind, "payload": payload}, default=str) + "\n")
        sys.stdout.flush()
        queue.task_done()


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
