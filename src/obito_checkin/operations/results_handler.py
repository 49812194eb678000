#!/usr/bin/env python3
"""
Results Handler Module
Reports the outcome of a run: summary line, summary log record and the
optional per-token JSONL stream.
"""

import os
import json
import logging
from typing import Optional

from obito_checkin.config import STATUS_MESSAGES
from obito_checkin.core.models import RunSummary, TokenOutcome

logger = logging.getLogger(__name__)


class ResultsHandler:
    """Emits run results; the JSONL stream is written only when a path is set."""

    def __init__(self, jsonl_out: Optional[str] = None):
        self.jsonl_out = jsonl_out

    def on_token_outcome(self, result: TokenOutcome) -> None:
        if self.jsonl_out:
            self.append_jsonl(self.jsonl_out, result)

    def append_jsonl(self, filepath: str, result: TokenOutcome) -> None:
        """Append a single TokenOutcome as JSONL line for durability."""
        os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)
        with open(filepath, 'a', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, default=str, ensure_ascii=False)
            f.write('\n')

    @staticmethod
    def format_summary(summary: RunSummary) -> str:
        return (
            f"{STATUS_MESSAGES['success']} Success: {summary.success} | "
            f"{STATUS_MESSAGES['failure']} Failed: {summary.failed} | "
            f"{STATUS_MESSAGES['duplicate']} Duplicates: {summary.duplicates}"
        )

    def report(self, summary: RunSummary) -> str:
        """Log the summary record and return the console line."""
        logger.info("Check-in completed", extra={"context": {
            "success": summary.success,
            "failed": summary.failed,
            "duplicates": summary.duplicates,
        }})
        return self.format_summary(summary)
