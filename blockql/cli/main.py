#!/usr/bin/env python3
"""
BlockQL CLI

Run block selection queries against an Ethereum JSON-RPC node, or serve
them over HTTP.

Usage:
    blockql block [--number N | --hash HASH | --tag TAG]
    blockql block-offset (--number N | --hash HASH | --tag TAG) --offset K
    blockql blocks --from N [--to M]
    blockql block-list (--number N ... | --hash HASH ...)
    blockql blocks-range (--numbers START END | --hashes START END)
    blockql serve [--host HOST] [--port PORT]
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import click

from ..api.main import build_service
from ..config import load_config
from ..constants import SERVICE_VERSION
from ..exceptions import BlockQLException
from ..service import BlockQueryService


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def run_query(ctx: click.Context, query: Callable[[BlockQueryService], Awaitable[Any]]) -> None:
    """Run one query coroutine and print its result as JSON."""

    async def runner():
        service = ctx.obj.get("service")
        if service is not None:
            return await query(service)

        service = build_service(ctx.obj["config"])
        try:
            return await query(service)
        finally:
            await service.source.aclose()

    try:
        result = asyncio.run(runner())
    except BlockQLException as e:
        raise click.ClickException(str(e))

    click.echo(json.dumps(_jsonable(result), indent=2))


def _optional(values: tuple) -> Optional[list]:
    """Multiple-value options arrive as an empty tuple when not given."""
    return list(values) if values else None


@click.group()
@click.version_option(version=SERVICE_VERSION, prog_name="blockql")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config.toml")
@click.option("--source-url", help="Upstream Ethereum JSON-RPC URL")
@click.option("--max-size", type=int, help="Maximum blocks per multi-block query")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], source_url: Optional[str], max_size: Optional[int]):
    """BlockQL Command Line Interface

    Select blocks by number, hash, tag, offset, range or list.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
        if source_url:
            config.source.url = source_url
        if max_size is not None:
            config.query.max_size = max_size
        config.validate()
    except BlockQLException as e:
        raise click.ClickException(str(e))
    ctx.obj["config"] = config


@cli.command("block")
@click.option("--number", "-n", type=int, help="Block number")
@click.option("--hash", "block_hash", help="Block hash")
@click.option("--tag", "-t", help="Block tag (latest, earliest, pending, ...)")
@click.pass_context
def block_cmd(ctx, number: Optional[int], block_hash: Optional[str], tag: Optional[str]):
    """Fetch a single block.

    Examples:

        blockql block --number 17000000

        blockql block --tag latest
    """
    run_query(ctx, lambda service: service.block(number=number, hash=block_hash, tag=tag))


@cli.command("block-offset")
@click.option("--number", "-n", type=int, help="Anchor block number")
@click.option("--hash", "block_hash", help="Anchor block hash")
@click.option("--tag", "-t", help="Anchor block tag")
@click.option("--offset", "-o", type=int, help="Offset from the anchor (may be negative)")
@click.pass_context
def block_offset_cmd(ctx, number, block_hash, tag, offset):
    """Fetch the block OFFSET blocks away from an anchor.

    Examples:

        blockql block-offset --tag latest --offset -10
    """
    run_query(ctx, lambda service: service.block_offset(number=number, hash=block_hash, tag=tag, offset=offset))


@cli.command("blocks")
@click.option("--from", "start", type=int, required=True, help="First block number")
@click.option("--to", "end", type=int, help="Last block number (default: chain head)")
@click.pass_context
def blocks_cmd(ctx, start: int, end: Optional[int]):
    """Fetch a contiguous, inclusive range of blocks."""
    run_query(ctx, lambda service: service.blocks(start, end))


@cli.command("block-list")
@click.option("--number", "-n", "numbers", type=int, multiple=True, help="Block number (repeatable)")
@click.option("--hash", "hashes", multiple=True, help="Block hash (repeatable)")
@click.pass_context
def block_list_cmd(ctx, numbers: tuple, hashes: tuple):
    """Fetch an explicit list of blocks, in the order given.

    Examples:

        blockql block-list -n 5 -n 3 -n 9
    """
    run_query(ctx, lambda service: service.block_list(numbers=_optional(numbers), hashes=_optional(hashes)))


@cli.command("blocks-range")
@click.option("--numbers", "number_range", type=int, nargs=2, default=None, help="START END block numbers")
@click.option("--hashes", "hash_range", nargs=2, default=None, help="START END block hashes")
@click.pass_context
def blocks_range_cmd(ctx, number_range, hash_range):
    """Fetch the inclusive range between two block numbers or hashes."""
    run_query(ctx, lambda service: service.blocks_range(
        number_range=list(number_range) if number_range else None,
        hash_range=list(hash_range) if hash_range else None,
    ))


@cli.command("serve")
@click.option("--host", help="Listen address (default: rpc.http.host)")
@click.option("--port", type=int, help="Listen port (default: rpc.http.port)")
@click.pass_context
def serve_cmd(ctx, host: Optional[str], port: Optional[int]):
    """Serve the JSON-RPC interface over HTTP."""
    import uvicorn

    from ..api.main import create_app

    config = ctx.obj["config"]
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.rpc.http.host,
        port=port or config.rpc.http.port,
        access_log=False,
        log_config=None,
    )


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
