import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

TOKEN_PREFIX_LENGTH = 5


def parse_tokens(raw: Optional[str]) -> List[str]:
    """
    Parse a comma-separated token list.

    Args:
        raw: Raw value, e.g. from the TOKENS environment variable

    Returns:
        List[str]: Trimmed tokens in their original order, empty entries dropped
    """
    if not raw:
        return []
    tokens = [part.strip() for part in raw.split(',')]
    tokens = [token for token in tokens if token]
    logger.debug(f"Parsed {len(tokens)} tokens")
    return tokens


def token_prefix(token: str, length: int = TOKEN_PREFIX_LENGTH) -> str:
    """
    Shorten a token to the prefix that may be shown in logs.

    Args:
        token: Full bearer token
        length: Number of leading characters to keep

    Returns:
        str: The leading characters only
    """
    return (token or "")[:length]


def display_name(name: Optional[str]) -> str:
    return name or "Unknown"


def format_duration(seconds: int) -> str:
    """
    Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        str: Formatted duration string
    """
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        remaining_seconds = seconds % 60
        return f"{minutes}m {remaining_seconds}s"
    else:
        hours = seconds // 3600
        remaining_minutes = (seconds % 3600) // 60
        return f"{hours}h {remaining_minutes}m"


def mask_proxy_url(proxy_url: str) -> str:
    """Hide credentials embedded in a proxy URL (``user:pass@host``)."""
    if '@' not in proxy_url:
        return proxy_url
    scheme, sep, rest = proxy_url.partition('://')
    if not sep:
        rest, scheme = proxy_url, ''
    host = rest.rsplit('@', 1)[1]
    return f"{scheme}://***@{host}" if scheme else f"***@{host}"
