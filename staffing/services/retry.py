# staffing/services/retry.py
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
    wait_none,
)

from staffing.services.errors import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "transient store error (attempt %d), retrying in %.3fs: %s",
        retry_state.attempt_number, delay, exc,
    )


def run_with_retry(
    fn: Callable[[], T],
    *,
    delays: Sequence[float],
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run fn, retrying only on TransientStoreError.

    One attempt per delay, then a final attempt after the backoff window. The
    last TransientStoreError is re-raised when everything fails; other errors
    (conflict, validation, not found) propagate on the first attempt.
    """
    attempts = len(delays) + 1
    retryer = Retrying(
        retry=retry_if_exception_type(TransientStoreError),
        stop=stop_after_attempt(attempts),
        wait=wait_chain(*(wait_fixed(d) for d in delays)) if delays else wait_none(),
        sleep=sleep,
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        return retryer(fn)
    except TransientStoreError as e:
        logger.error("transient store error, %d attempts exhausted: %s", attempts, e)
        raise
