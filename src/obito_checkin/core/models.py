#!/usr/bin/env python3
"""
Core models and result types for the check-in run.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Literal, Optional, Set
import time

Outcome = Literal["invalid", "duplicate", "already_checked_in", "success", "failure"]

FailureReason = Literal["timeout", "network", "http_status", "bad_response", "no_account", "error"]


@dataclass(frozen=True)
class AccountInfo:
    id: Any
    display_name: Optional[str] = None
    is_checked_in: bool = False


@dataclass(frozen=True)
class RetryFailure:
    """Why an operation gave up, after how many attempts."""
    reason: FailureReason
    message: str
    attempts: int
    http_status: Optional[int] = None


@dataclass(frozen=True)
class ValidationResult:
    account: Optional[AccountInfo] = None
    failure: Optional[RetryFailure] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.account is not None


@dataclass(frozen=True)
class CheckInResult:
    ok: bool
    failure: Optional[RetryFailure] = None
    attempts: int = 1
    payload: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class TokenOutcome:
    index: int
    token_prefix: str
    outcome: Outcome
    account_id: Optional[Any] = None
    display_name: Optional[str] = None
    detail: Optional[str] = None
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RunSummary:
    total: int
    success: int
    failed: int

    @property
    def duplicates(self) -> int:
        # Already-checked-in accounts land here as well.
        return self.total - self.success - self.failed

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "duplicates": self.duplicates,
        }


@dataclass
class RunState:
    """Mutable state of a single run, owned by the orchestrator."""
    total: int = 0
    success: int = 0
    failed: int = 0
    processed: Set[Any] = field(default_factory=set)
    outcomes: List[TokenOutcome] = field(default_factory=list)

    def update_with(self, result: TokenOutcome) -> None:
        self.outcomes.append(result)
        self.total += 1
        if result.outcome == "success":
            self.success += 1
        elif result.outcome in ("failure", "invalid"):
            self.failed += 1

    def summary(self) -> RunSummary:
        return RunSummary(total=self.total, success=self.success, failed=self.failed)
