#!/usr/bin/env python3
"""
Obito Check-In CLI
Runs the daily check-in for every configured token with rich terminal feedback.
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from obito_checkin.config import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION, DEFAULT_LOG_FILE,
    ERROR_MESSAGES, SUCCESS_MESSAGES, STATUS_MESSAGES,
    ConfigError, Settings, load_settings,
)
from obito_checkin.core.api_client import CheckInApiClient
from obito_checkin.core.descriptor_models import load_descriptor
from obito_checkin.core.models import TokenOutcome
from obito_checkin.core.pacing import RandomPacing
from obito_checkin.core.retry_policy import RetryPolicy
from obito_checkin.logging_setup import setup_logging
from obito_checkin.operations.executor import CheckInExecutor
from obito_checkin.operations.orchestrator import RunOrchestrator
from obito_checkin.operations.results_handler import ResultsHandler
from obito_checkin.operations.validator import AccountValidator
from obito_checkin.utils import format_duration, mask_proxy_url

logger = logging.getLogger(__name__)

console = Console()


class ConsoleUI:
    """Rich-based per-token progress: a spinner while working, one line per outcome."""

    def __init__(self, results_handler: ResultsHandler, out: Console = console):
        self.results_handler = results_handler
        self.console = out
        self._status = None

    @staticmethod
    def print_banner(out: Console = console):
        now = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        out.print(Panel.fit(
            f"{STATUS_MESSAGES['start']} [bold cyan]{APP_NAME}[/] v{APP_VERSION}\n"
            f"[dim]{APP_DESCRIPTION}[/]\n"
            f"{STATUS_MESSAGES['date']} Started: {now}",
            border_style="cyan",
        ))

    def on_token_start(self, index: int, total: int, prefix: str):
        self._status = self.console.status(f"Processing token {index}/{total}: {prefix}...")
        self._status.start()

    def stop(self):
        """Stop the spinner if one is running."""
        if self._status is not None:
            self._status.stop()
            self._status = None

    def on_token_outcome(self, result: TokenOutcome):
        self.stop()
        self.console.print(self.describe(result))
        self.results_handler.on_token_outcome(result)

    @staticmethod
    def describe(result: TokenOutcome) -> str:
        name = result.display_name or "Unknown"
        if result.outcome == "invalid":
            return f"[red]✖ Invalid token: {result.token_prefix}[/]"
        if result.outcome == "duplicate":
            return f"[yellow]⚠ Duplicate account: {name}[/]"
        if result.outcome == "already_checked_in":
            return f"[green]✔ Already checked in: {name}[/]"
        if result.outcome == "success":
            return f"[green]✔ Success: {name}[/]"
        if result.account_id is None and result.detail:
            return f"[red]✖ Error: {result.detail}[/]"
        return f"[red]✖ Failed: {name}[/]"


def build_orchestrator(settings: Settings, client: CheckInApiClient, listener=None,
                       pacing=None) -> RunOrchestrator:
    policy = RetryPolicy(max_attempts=settings.max_retries, base_delay=settings.retry_base_delay)
    return RunOrchestrator(
        validator=AccountValidator(client, policy),
        executor=CheckInExecutor(client, policy),
        pacing=pacing or RandomPacing(),
        listener=listener,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.no_banner:
        ConsoleUI.print_banner()

    try:
        settings = load_settings(env_file=args.env_file, tokens_override=args.tokens)
    except ConfigError as e:
        setup_logging(console, args.verbose, args.log_file or DEFAULT_LOG_FILE)
        console.print(f"[red]{e}[/]")
        logger.error("No tokens provided" if str(e) == ERROR_MESSAGES['no_tokens'] else str(e))
        return 1

    setup_logging(console, args.verbose, args.log_file or settings.log_file)

    try:
        descriptor = load_descriptor(args.descriptor or settings.descriptor_path)
    except ConfigError as e:
        console.print(f"[red]{e}[/]")
        logger.error(str(e))
        return 1

    if settings.proxy_url:
        console.print(f"[yellow]{SUCCESS_MESSAGES['using_proxy']}[/]")
        logger.info(f"Using proxy {mask_proxy_url(settings.proxy_url)}")

    results_handler = ResultsHandler(jsonl_out=args.jsonl_out)
    ui = ConsoleUI(results_handler)
    client = CheckInApiClient(descriptor, proxy_url=settings.proxy_url,
                              timeout_ms=settings.request_timeout_ms)
    orchestrator = build_orchestrator(settings, client, listener=ui)

    console.print(f"[blue]{SUCCESS_MESSAGES['processing_tokens'].format(count=len(settings.tokens))}[/]\n")
    start_time = datetime.now()
    try:
        state = orchestrator.run(settings.tokens)
    except KeyboardInterrupt:
        console.print(f"\n{ERROR_MESSAGES['interrupted']}")
        return 130
    except Exception as e:
        console.print(f"\n[red]{ERROR_MESSAGES['critical']}[/] {e}")
        logger.error("Bot crashed", extra={"context": {"error": str(e)}})
        if args.verbose:
            console.print_exception()
        return 1
    finally:
        ui.stop()
        client.close()

    summary_line = results_handler.report(state.summary())
    elapsed = int((datetime.now() - start_time).total_seconds())
    console.print(f"\n[bold bright_green]{summary_line}[/]")
    console.print(f"[dim]Elapsed: {format_duration(elapsed)}[/]")
    return 0


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  TOKENS             Comma-separated bearer tokens (required unless --tokens)
  MAX_RETRIES        Attempts per request (default: 3)
  RETRY_BASE_DELAY   Linear backoff base in ms (default: 5000)
  PROXY_URL          Route all requests through this proxy
  LOG_FILE           JSON-lines log file (default: logs/checkin.log)
  API_DESCRIPTOR     JSON/YAML API descriptor overriding the built-in one

Examples:
  %(prog)s
  %(prog)s --env-file accounts.env --jsonl-out runs/today.jsonl
        """
    )

    parser.add_argument("--tokens", help="Comma-separated tokens; overrides TOKENS")
    parser.add_argument("--env-file", default=None, help="Path to a .env file (default: auto-discover .env)")
    parser.add_argument("--descriptor", help="API descriptor file (JSON or YAML)")
    parser.add_argument("--log-file", help=f"JSON-lines log file (default: {DEFAULT_LOG_FILE})")
    parser.add_argument("--jsonl-out", help="Stream every per-token outcome to a JSONL file")
    parser.add_argument("--no-banner", action="store_true", help="Don't show application banner")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} v{APP_VERSION}")
    return parser


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
