#!/usr/bin/env python3
"""
Account Validator
Resolves a token to the account it belongs to.
"""

import logging
from typing import Any, Dict

from obito_checkin.core.api_client import CheckInApiClient
from obito_checkin.core.descriptor_models import ResponseFields
from obito_checkin.core.models import AccountInfo, RetryFailure, ValidationResult
from obito_checkin.core.retry_policy import RetryPolicy, classify_failure
from obito_checkin.utils import token_prefix

logger = logging.getLogger(__name__)


def parse_account(data: Dict[str, Any], fields: ResponseFields) -> AccountInfo:
    name = data.get(fields.name)
    return AccountInfo(
        id=data.get(fields.id),
        display_name=str(name) if name else None,
        is_checked_in=bool(data.get(fields.checked_in, False)),
    )


class AccountValidator:
    """Fetches the profile behind a token, retrying transient failures."""

    def __init__(self, client: CheckInApiClient, policy: RetryPolicy):
        self.client = client
        self.policy = policy

    def validate(self, token: str) -> ValidationResult:
        outcome = self.policy.call(self.client.fetch_profile, token)
        if not outcome.ok:
            failure = classify_failure(outcome.error, outcome.attempts)
            logger.error(
                f"Token validation failed after {outcome.attempts} attempts: {failure.message}",
                extra={"context": {"token": token_prefix(token), "reason": failure.reason}},
            )
            return ValidationResult(failure=failure, attempts=outcome.attempts)

        if outcome.value is None:
            logger.warning(
                "Profile response carried no account",
                extra={"context": {"token": token_prefix(token)}},
            )
            failure = RetryFailure(reason="no_account", message="Profile response carried no account",
                                   attempts=outcome.attempts)
            return ValidationResult(failure=failure, attempts=outcome.attempts)

        account = parse_account(outcome.value, self.client.descriptor.response)
        logger.debug(f"Token {token_prefix(token)} resolved to account {account.id}")
        return ValidationResult(account=account, attempts=outcome.attempts)
