import asyncio
import logging
import signal

import click
from rich.console import Console
from rich.logging import RichHandler

from .clients.access import AccessAPI
from .constants import (
    DEFAULT_MAX_HEIGHT_RANGE,
    DEFAULT_POLLING_INTERVAL_S,
    FLOW_TOKEN_EVENTS,
    MAINNET_ACCESS_URL,
)
from .core.config import ErrorBehavior, PollerConfig, WatchConfig
from .core.errors import PollingAborted, StartupError
from .core.models import BlockEvent, Subscription
from .polling.poller import EventPoller

console = Console()
logger = logging.getLogger("flowpoller")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def format_event(be: BlockEvent) -> str:
    ev = be.event
    return f"Tx : {ev.transaction_id} => {ev.type} : {ev.key}"


async def consume(sub: Subscription) -> None:
    """Print every event delivered to `sub` until cancelled."""
    async for be in sub:
        console.print(f"[dim]#{be.block_height}[/] {format_event(be)}")


def install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # windows
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))


async def watch(config: WatchConfig) -> None:
    """Poll the Access API and print events until interrupted."""
    stop = asyncio.Event()
    install_signal_handlers(stop)

    async with AccessAPI(config.access_url, timeout_s=config.timeout_s) as api:
        poller = EventPoller(api, config.interval_s, config.poller)
        sub = poller.subscribe(config.events)
        consumer = asyncio.create_task(consume(sub))
        try:
            await poller.run(stop)
        finally:
            consumer.cancel()
            await asyncio.gather(consumer, return_exceptions=True)


@click.group()
def cli() -> None:
    """flowpoller: poll a Flow Access node and stream events."""


@cli.command("watch")
@click.option("--access-url", default=MAINNET_ACCESS_URL, show_default=True, help="Access API REST URL")
@click.option(
    "--event",
    "events",
    multiple=True,
    default=FLOW_TOKEN_EVENTS,
    show_default=True,
    help="Fully qualified event type; repeat to subscribe to several",
)
@click.option("--interval", type=float, default=DEFAULT_POLLING_INTERVAL_S, show_default=True, help="Seconds between polls")
@click.option("--start-height", type=int, default=None, help="First reference height (default: latest sealed)")
@click.option(
    "--max-height-range",
    type=int,
    default=DEFAULT_MAX_HEIGHT_RANGE,
    show_default=True,
    help="Max blocks per events query",
)
@click.option(
    "--on-error",
    type=click.Choice([b.value for b in ErrorBehavior]),
    default=ErrorBehavior.CONTINUE.value,
    show_default=True,
    help="Keep polling or abort when an events query fails",
)
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="HTTP timeout (s)")
@click.option("--log-level", default="info", show_default=True, help="Logging level")
def watch_cmd(
    access_url: str,
    events: tuple[str, ...],
    interval: float,
    start_height: int | None,
    max_height_range: int,
    on_error: str,
    timeout_s: int,
    log_level: str,
) -> None:
    """Stream events of the given types as new blocks are sealed."""
    configure_logging(log_level)

    try:
        config = WatchConfig(
            events=list(events),
            access_url=access_url,
            interval_s=interval,
            timeout_s=timeout_s,
            poller=PollerConfig(
                start_height=start_height,
                max_height_range=max_height_range,
                error_behavior=ErrorBehavior(on_error),
            ),
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    logger.info("Starting up...")
    try:
        asyncio.run(watch(config))
    except (StartupError, PollingAborted) as e:
        raise click.ClickException(f"error running event poller: {e}") from e
    logger.info("Shutting down...")


if __name__ == "__main__":
    cli()
