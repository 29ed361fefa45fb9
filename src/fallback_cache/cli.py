from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import click

from .core.orchestrator import FallbackCache


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value))


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@click.group()
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level")
@click.option("--name", default="cli", show_default=True, help="Name used for this cache in log lines")
@click.pass_context
def main(ctx: click.Context, log_level: str, name: str) -> None:
    """Inspect and poke the cache using settings from the environment."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = FallbackCache.from_env(name=name)


@main.command()
@click.pass_obj
def ping(cache: FallbackCache) -> None:
    _echo_json(asyncio.run(cache.ping()))


@main.command()
@click.pass_obj
def stats(cache: FallbackCache) -> None:
    _echo_json(cache.get_stats())


@main.command()
@click.argument("key")
@click.pass_obj
def get(cache: FallbackCache, key: str) -> None:
    _echo_json(asyncio.run(cache.get(key)))


@main.command(name="set")
@click.argument("key")
@click.argument("value")
@click.option("--ttl", default=3600, show_default=True, type=int, help="Time to live in seconds")
@click.pass_obj
def set_(cache: FallbackCache, key: str, value: str, ttl: int) -> None:
    """Store VALUE (parsed as JSON when possible) under KEY."""
    _echo_json(asyncio.run(cache.set(key, _parse_value(value), ttl)))


@main.command()
@click.argument("key")
@click.pass_obj
def delete(cache: FallbackCache, key: str) -> None:
    _echo_json(asyncio.run(cache.delete(key)))


@main.command()
@click.argument("key")
@click.pass_obj
def incr(cache: FallbackCache, key: str) -> None:
    _echo_json(asyncio.run(cache.increment(key)))


@main.command()
@click.argument("key")
@click.argument("ttl", type=int)
@click.pass_obj
def expire(cache: FallbackCache, key: str, ttl: int) -> None:
    _echo_json(asyncio.run(cache.expire(key, ttl)))
