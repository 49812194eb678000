#!/usr/bin/env python3
"""
Check-In Executor
Performs the check-in action for a validated account.
"""

import logging

from obito_checkin.core.api_client import CheckInApiClient
from obito_checkin.core.models import AccountInfo, CheckInResult
from obito_checkin.core.retry_policy import RetryPolicy, classify_failure
from obito_checkin.utils import token_prefix

logger = logging.getLogger(__name__)


class CheckInExecutor:
    def __init__(self, client: CheckInApiClient, policy: RetryPolicy):
        self.client = client
        self.policy = policy

    def check_in(self, token: str, account: AccountInfo) -> CheckInResult:
        outcome = self.policy.call(self.client.check_in, token)
        if outcome.ok:
            return CheckInResult(ok=True, attempts=outcome.attempts, payload=outcome.value)

        failure = classify_failure(outcome.error, outcome.attempts)
        logger.error(
            f"Check-in failed after {outcome.attempts} attempts: {failure.message}",
            extra={"context": {"token": token_prefix(token), "user": account.display_name,
                               "reason": failure.reason}},
        )
        return CheckInResult(ok=False, failure=failure, attempts=outcome.attempts)
