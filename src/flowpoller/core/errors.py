"""
Exceptions raised by the event poller.

Exception hierarchy:
- PollerError (base)
  - StartupError: the initial reference height could not be determined
  - PollingAborted: a fetch failed under ErrorBehavior.STOP
  - LedgerQueryError: the Access API returned an unexpected response
"""

from __future__ import annotations

from typing import Any, Optional


class PollerError(Exception):
    """Base exception for all poller errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class StartupError(PollerError):
    """Raised by `EventPoller.run` when the start header lookup fails."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, component="scheduler", **kwargs)


class PollingAborted(PollerError):
    """Polling aborted due to an error (ErrorBehavior.STOP)."""

    def __init__(
        self,
        message: str = "polling aborted due to an error",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, component="scheduler", **kwargs)


class LedgerQueryError(PollerError):
    """Malformed or unexpected response from the ledger query API."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, component="client", **kwargs)
