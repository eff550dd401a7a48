import asyncio
import io
import logging
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console
from rich.logging import RichHandler

from flowpoller.cli import cli, configure_logging, format_event, watch
from flowpoller.constants import FLOW_TOKEN_EVENTS
from flowpoller.core.config import ErrorBehavior, WatchConfig
from flowpoller.core.errors import PollingAborted, StartupError
from flowpoller.core.models import BlockEvent
from tests.conftest import FakeLedger, make_block, make_event, wait_for_condition


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_watch_builds_config() -> None:
    with patch("flowpoller.cli.watch", new=AsyncMock()) as mock_watch:
        result = CliRunner().invoke(
            cli,
            [
                "watch",
                "--access-url",
                "http://localhost:8888",
                "--event",
                "A.1.C.E",
                "--interval",
                "5",
                "--start-height",
                "10",
                "--max-height-range",
                "100",
                "--on-error",
                "stop",
            ],
        )

    assert result.exit_code == 0, result.output
    config: WatchConfig = mock_watch.await_args.args[0]
    assert config.access_url == "http://localhost:8888"
    assert config.events == ["A.1.C.E"]
    assert config.interval_s == 5.0
    assert config.poller.start_height == 10
    assert config.poller.max_height_range == 100
    assert config.poller.error_behavior is ErrorBehavior.STOP


def test_watch_defaults_to_flow_token_events() -> None:
    with patch("flowpoller.cli.watch", new=AsyncMock()) as mock_watch:
        result = CliRunner().invoke(cli, ["watch"])

    assert result.exit_code == 0, result.output
    config: WatchConfig = mock_watch.await_args.args[0]
    assert config.events == list(FLOW_TOKEN_EVENTS)
    assert config.poller.start_height is None


def test_watch_rejects_bad_range() -> None:
    with patch("flowpoller.cli.watch", new=AsyncMock()) as mock_watch:
        result = CliRunner().invoke(cli, ["watch", "--max-height-range", "0"])

    assert result.exit_code == 2
    mock_watch.assert_not_awaited()


def test_watch_reports_abort() -> None:
    with patch("flowpoller.cli.watch", new=AsyncMock(side_effect=PollingAborted())):
        result = CliRunner().invoke(cli, ["watch", "--on-error", "stop"])

    assert result.exit_code == 1
    assert "polling aborted" in result.output


def test_watch_reports_startup_error() -> None:
    with patch("flowpoller.cli.watch", new=AsyncMock(side_effect=StartupError("no header"))):
        result = CliRunner().invoke(cli, ["watch"])

    assert result.exit_code == 1
    assert "no header" in result.output


def test_format_event() -> None:
    be = BlockEvent(event=make_event("A.1.C.E", "tx9", 2), block_id="b", block_height=1)
    assert format_event(be) == "Tx : tx9 => A.1.C.E : tx9.2"


def test_configure_logging_uses_rich_handler() -> None:
    configure_logging("debug")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in root.handlers)


class _LedgerSession(FakeLedger):
    """FakeLedger usable in place of `AccessAPI(...)`."""

    closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_watch_streams_events_until_stopped() -> None:
    ledger = _LedgerSession(
        heads=[100, 101],
        events={"A.1.C.E": [make_block(101, make_event("A.1.C.E", "tx1", 0))]},
    )
    out = io.StringIO()
    stops: list[asyncio.Event] = []
    config = WatchConfig(events=["A.1.C.E"], access_url="http://node", interval_s=0.01)

    with (
        patch("flowpoller.cli.AccessAPI", return_value=ledger) as mock_api,
        patch("flowpoller.cli.install_signal_handlers", side_effect=stops.append),
        patch("flowpoller.cli.console", Console(file=out, width=200)),
    ):
        task = asyncio.create_task(watch(config))
        await wait_for_condition(lambda: "Tx : tx1 => A.1.C.E : tx1.0" in out.getvalue())
        assert len(stops) == 1
        stops[0].set()
        assert await asyncio.wait_for(task, 1.0) is None

    mock_api.assert_called_once_with("http://node", timeout_s=20)
    assert ledger.closed
    await asyncio.sleep(0)
    # consumer task was cancelled and collected
    assert [t for t in asyncio.all_tasks() if t is not asyncio.current_task()] == []
