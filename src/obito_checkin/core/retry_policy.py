#!/usr/bin/env python3
"""
Bounded retry with linear backoff for remote calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from obito_checkin.core.models import RetryFailure

logger = logging.getLogger(__name__)


@dataclass
class RetryOutcome:
    value: Any = None
    error: Optional[requests.RequestException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def classify_failure(error: requests.RequestException, attempts: int) -> RetryFailure:
    """Map a transport exception onto a typed failure reason."""
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(error, requests.exceptions.Timeout):
        reason = "timeout"
    elif isinstance(error, requests.exceptions.HTTPError):
        reason = "http_status"
    elif isinstance(error, requests.exceptions.ConnectionError):
        reason = "network"
    elif response is not None:
        reason = "bad_response"
    else:
        reason = "network"
    return RetryFailure(reason=reason, message=str(error), attempts=attempts, http_status=status)


class RetryPolicy:
    """Run a callable up to ``max_attempts`` times.

    The wait after failed attempt *k* is ``base_delay * k`` seconds. Only
    ``requests.RequestException`` is considered transient; anything else is
    raised to the caller immediately.
    """

    def __init__(self, max_attempts: int = 3, base_delay: float = 5.0,
                 sleep: Callable[[float], None] = time.sleep):
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = max(0.0, float(base_delay))
        self.sleep = sleep

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay, increment=self.base_delay),
            retry=retry_if_exception_type(requests.RequestException),
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.INFO),
            reraise=True,
        )

    def call(self, fn: Callable[..., Any], *args, **kwargs) -> RetryOutcome:
        attempts = 0

        def attempt():
            nonlocal attempts
            attempts += 1
            return fn(*args, **kwargs)

        try:
            value = self._retrying()(attempt)
        except requests.RequestException as e:
            return RetryOutcome(error=e, attempts=attempts)
        return RetryOutcome(value=value, attempts=attempts)
