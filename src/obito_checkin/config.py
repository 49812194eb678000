#!/usr/bin/env python3
"""
Obito Check-In Configuration Module
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from obito_checkin.utils import parse_tokens

# Application Information
APP_NAME = "Obito Auto Check-In Bot"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Daily check-in for multiple Hi-Pin accounts"

# Default Settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_MS = 5000
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FILE = os.path.join("logs", "checkin.log")
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# Request Settings
REQUEST_TIMEOUT_MS = 10000

# Pacing between tokens (milliseconds)
PACING_MIN_MS = 2000
PACING_JITTER_MS = 1000

# Environment variable names
ENV_TOKENS = "TOKENS"
ENV_MAX_RETRIES = "MAX_RETRIES"
ENV_RETRY_BASE_DELAY = "RETRY_BASE_DELAY"
ENV_PROXY_URL = "PROXY_URL"
ENV_LOG_FILE = "LOG_FILE"
ENV_API_DESCRIPTOR = "API_DESCRIPTOR"

# Status icons
STATUS_MESSAGES = {
    'success': '✅',
    'failure': '❌',
    'invalid': '❌',
    'duplicate': '🚫',
    'already_checked_in': '✅',
    'warning': '⚠️',
    'info': 'ℹ️',
    'processing': '🔍',
    'start': '🚀',
    'date': '📅',
}

# Error messages
ERROR_MESSAGES = {
    'no_tokens': "❌ No tokens found in environment variables!",
    'invalid_integer': "❌ {name} must be an integer >= {minimum}, got {value!r}",
    'descriptor_not_found': "❌ API descriptor not found: {file}",
    'interrupted': "⚠️  Operation interrupted by user.",
    'critical': "⚠️ Critical error:",
}

# Success messages
SUCCESS_MESSAGES = {
    'using_proxy': "ℹ Using proxy for requests",
    'processing_tokens': "ℹ Processing {count} tokens...",
}

# Logging configuration
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ConfigError(RuntimeError):
    """Raised when the run cannot start because of missing or invalid settings."""


@dataclass
class Settings:
    """Resolved runtime settings for one invocation."""

    tokens: List[str]
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    proxy_url: Optional[str] = None
    log_file: str = DEFAULT_LOG_FILE
    descriptor_path: Optional[str] = None
    request_timeout_ms: int = REQUEST_TIMEOUT_MS

    @property
    def retry_base_delay(self) -> float:
        """Base backoff delay in seconds."""
        return self.retry_base_delay_ms / 1000.0

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000.0


def _read_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigError(ERROR_MESSAGES['invalid_integer'].format(name=name, minimum=minimum, value=raw)) from exc
    if value < minimum:
        raise ConfigError(ERROR_MESSAGES['invalid_integer'].format(name=name, minimum=minimum, value=raw))
    return value


def load_tokens(raw: Optional[str]) -> List[str]:
    """Split the comma-separated token list; an empty result is fatal."""
    tokens = parse_tokens(raw)
    if not tokens:
        raise ConfigError(ERROR_MESSAGES['no_tokens'])
    return tokens


def load_settings(env: Optional[Mapping[str, str]] = None, env_file: Optional[str] = None,
                  tokens_override: Optional[str] = None) -> Settings:
    """Build :class:`Settings` from the environment.

    Args:
        env: Mapping to read instead of ``os.environ`` (``.env`` loading is
            skipped when given).
        env_file: Explicit dotenv file; defaults to ``.env`` discovery.
        tokens_override: Comma-separated tokens taking precedence over ``TOKENS``.

    Raises:
        ConfigError: when no tokens remain or a numeric setting is invalid.
    """
    if env is None:
        load_dotenv(dotenv_path=env_file)
        env = os.environ

    tokens = load_tokens(tokens_override if tokens_override is not None else env.get(ENV_TOKENS))
    proxy_url = (env.get(ENV_PROXY_URL) or "").strip() or None
    descriptor_path = (env.get(ENV_API_DESCRIPTOR) or "").strip() or None

    return Settings(
        tokens=tokens,
        max_retries=_read_int(env, ENV_MAX_RETRIES, DEFAULT_MAX_RETRIES, minimum=1),
        retry_base_delay_ms=_read_int(env, ENV_RETRY_BASE_DELAY, DEFAULT_RETRY_BASE_DELAY_MS, minimum=0),
        proxy_url=proxy_url,
        log_file=(env.get(ENV_LOG_FILE) or "").strip() or DEFAULT_LOG_FILE,
        descriptor_path=descriptor_path,
    )
