"""Optimistic update with rollback, shared by every configuration sub-resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import requests

from shopcore.services.logging import log_event

from .api_client import ApiError

StateT = TypeVar("StateT")


class Notifier:
    """Where user-facing success/error/warning messages go."""

    def success(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError

    def warning(self, message: str) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    def success(self, message: str) -> None:
        log_event("info", "dashboard.notify", kind="success", message=message)

    def error(self, message: str) -> None:
        log_event("error", "dashboard.notify", kind="error", message=message)

    def warning(self, message: str) -> None:
        log_event("warning", "dashboard.notify", kind="warning", message=message)


@dataclass
class RecordingNotifier(Notifier):
    messages: List[Tuple[str, str]] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def of_kind(self, kind: str) -> List[str]:
        return [m for k, m in self.messages if k == kind]


@dataclass
class OptimisticResult:
    ok: bool
    data: Any = None
    error: Optional[ApiError] = None

    def __bool__(self) -> bool:
        return self.ok


def attempt(
    get_state: Callable[[], StateT],
    set_state: Callable[[StateT], None],
    new_state: StateT,
    request: Callable[[], Any],
    notifier: Notifier,
    success_message: Optional[str] = None,
    failure_message: str = "Request failed",
) -> OptimisticResult:
    """Apply ``new_state`` now, run ``request``, and put the old state back if it fails.

    ``request`` goes through :class:`ApiClient`, which raises ``ApiError`` for
    non-2xx responses, ``success: false`` envelopes, auth failures and
    transport errors alike.
    """
    snapshot = get_state()
    set_state(new_state)
    try:
        data = request()
    except ApiError as exc:
        set_state(snapshot)
        message = exc.first_error if exc.status else failure_message
        notifier.error(message or failure_message)
        log_event("warning", "dashboard.rollback", status=exc.status, message=exc.message)
        return OptimisticResult(ok=False, error=exc)
    except requests.RequestException as exc:
        set_state(snapshot)
        notifier.error(failure_message)
        log_event("warning", "dashboard.rollback", status=0, message=str(exc))
        return OptimisticResult(ok=False, error=ApiError(0, failure_message))
    if success_message:
        notifier.success(success_message)
    return OptimisticResult(ok=True, data=data)
