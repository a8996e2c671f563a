"""
OpenAI Client — Remote collaborator access and poll loop

The remote API is opaque to the dispatcher: a call returns a result
object or raises. This module owns the three seams around it:
- building the client from config (key read from the environment only)
- converting SDK objects to plain data for printing and logging
- polling long-running operations to a terminal state
"""

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import openai

from ..config import ApiConfig, PollConfig
from ..errors import ExternalOperationFailure


# Statuses that mean "keep polling"
RUN_ACTIVE = ("queued", "in_progress", "cancelling")
BATCH_ACTIVE = ("in_progress",)


def create_client(api: ApiConfig) -> openai.OpenAI:
    """Build the SDK client. The key is passed through, never inspected."""
    kwargs = {"api_key": api.api_key}
    if api.base_url:
        kwargs["base_url"] = api.base_url
    try:
        return openai.OpenAI(**kwargs)
    except openai.OpenAIError as e:
        raise ExternalOperationFailure(f"{e} (set ${api.key_env})") from e


@contextmanager
def remote_errors() -> Iterator[None]:
    """Re-raise SDK errors as ExternalOperationFailure, message verbatim."""
    try:
        yield
    except openai.OpenAIError as e:
        raise ExternalOperationFailure(str(e)) from e


def to_plain(obj: Any) -> Any:
    """
    SDK object -> JSON-compatible data.

    Handles pydantic models, cursor pages (their .data), lists and dicts.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, dict):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(item) for item in obj]
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "data") and isinstance(getattr(obj, "data"), list):
        return to_plain(obj.data)
    return str(obj)


def status_of(obj: Any) -> Optional[str]:
    if isinstance(obj, dict):
        return obj.get("status")
    return getattr(obj, "status", None)


class Poller:
    """
    Polls a remote object until its status leaves the active set.

    Interval starts at poll.interval, grows by poll.backoff up to
    poll.max_interval, and gives up after poll.max_attempts refreshes.
    """

    def __init__(self, config: PollConfig, sleep: Callable[[float], None] = time.sleep,
                 on_progress: Optional[Callable[[str], None]] = None):
        self.config = config
        self._sleep = sleep
        self._on_progress = on_progress

    def until_done(self, initial: Any, refresh: Callable[[Any], Any],
                   active=RUN_ACTIVE, what: str = "operation") -> Any:
        """
        Returns the first object whose status is not in ``active``.

        Raises:
            ExternalOperationFailure: still active after max_attempts refreshes.
        """
        current = initial
        delay = self.config.interval
        attempts = 0

        while status_of(current) in active:
            if attempts >= self.config.max_attempts:
                raise ExternalOperationFailure(
                    f"{what} still '{status_of(current)}' after {attempts} polls; giving up"
                )
            if self._on_progress is not None:
                self._on_progress(f"{what} status: {status_of(current)}")
            self._sleep(delay)
            delay = min(delay * self.config.backoff, self.config.max_interval)
            current = refresh(current)
            attempts += 1

        return current
