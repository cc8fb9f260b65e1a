"""Wrap a remote call in a labelled progress indicator."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from cpush.api.client import ApiError
from cpush.core.result import Err, Ok, Result
from cpush.output.console import ConsoleProtocol

from .patch_errors import RemoteCallFailed

T = TypeVar("T")


def remote_call(
    console: ConsoleProtocol,
    label: str,
    call: Callable[[], Result[T, ApiError]],
) -> Result[T, RemoteCallFailed]:
    """Run ``call``; on failure mark the progress failed with the server's message."""
    progress = console.progress(label)
    result = call()
    if isinstance(result, Err):
        progress.fail(str(result.error))
        return Err(RemoteCallFailed(step=label, message=str(result.error)))
    progress.complete()
    return Ok(result.value)
