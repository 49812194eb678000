#!/usr/bin/env python3
"""
Run Orchestrator
Drives the tokens of one run through validation and check-in, one at a time.
"""

import logging
from typing import List, Optional

from obito_checkin.core.models import RunState, TokenOutcome
from obito_checkin.core.pacing import Pacing, RandomPacing
from obito_checkin.operations.executor import CheckInExecutor
from obito_checkin.operations.validator import AccountValidator
from obito_checkin.utils import display_name, token_prefix

logger = logging.getLogger(__name__)


class RunOrchestrator:
    """Sequential check-in run over a list of tokens.

    ``listener`` is optional; when present its ``on_token_start(index, total,
    prefix)`` and ``on_token_outcome(outcome)`` methods are called around each
    token so a console layer can render progress.
    """

    def __init__(self, validator: AccountValidator, executor: CheckInExecutor,
                 pacing: Optional[Pacing] = None, listener=None):
        self.validator = validator
        self.executor = executor
        self.pacing = pacing or RandomPacing()
        self.listener = listener

    def _notify(self, method: str, *args) -> None:
        if self.listener is not None and hasattr(self.listener, method):
            getattr(self.listener, method)(*args)

    def run(self, tokens: List[str]) -> RunState:
        state = RunState()
        total = len(tokens)
        logger.info(f"Processing {total} tokens")

        for index, token in enumerate(tokens, 1):
            self._notify('on_token_start', index, total, token_prefix(token))
            result = self.process_token(index, token, state)
            state.update_with(result)
            self._notify('on_token_outcome', result)
            self.pacing.wait()

        return state

    def process_token(self, index: int, token: str, state: RunState) -> TokenOutcome:
        """Decide the outcome of one token; mutates ``state.processed`` only."""
        prefix = token_prefix(token)
        try:
            validation = self.validator.validate(token)
            if not validation.ok:
                return TokenOutcome(index=index, token_prefix=prefix, outcome="invalid",
                                    detail=validation.failure.reason if validation.failure else None)

            account = validation.account
            name = display_name(account.display_name)

            # Duplicate wins over already-checked-in.
            if account.id in state.processed:
                return TokenOutcome(index=index, token_prefix=prefix, outcome="duplicate",
                                    account_id=account.id, display_name=name)

            if account.is_checked_in:
                state.processed.add(account.id)
                return TokenOutcome(index=index, token_prefix=prefix, outcome="already_checked_in",
                                    account_id=account.id, display_name=name)

            result = self.executor.check_in(token, account)
            if result.ok:
                state.processed.add(account.id)
                return TokenOutcome(index=index, token_prefix=prefix, outcome="success",
                                    account_id=account.id, display_name=name)

            return TokenOutcome(index=index, token_prefix=prefix, outcome="failure",
                                account_id=account.id, display_name=name,
                                detail=result.failure.reason if result.failure else None)

        except Exception as e:
            logger.exception("Processing error", extra={"context": {"token": prefix, "error": str(e)}})
            return TokenOutcome(index=index, token_prefix=prefix, outcome="failure", detail=str(e))
