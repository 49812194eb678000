import json
import logging
import os
import tempfile
import unittest
from unittest.mock import patch

import requests

from obito_checkin import checkin_cli


class DummyResponse:
    def __init__(self, status_code=200, json_obj=None):
        self.status_code = status_code
        self._json = json_obj
        self.text = "{}" if json_obj is not None else ""

    def json(self):
        return self._json


ACCOUNTS = {
    "token-alpha-1": {"id": 1, "name": "Alpha", "isCheckIn": False},
    "token-alpha-2": {"id": 1, "name": "Alpha", "isCheckIn": False},
    "token-bravo-1": {"id": 2, "name": "Bravo", "isCheckIn": True},
}


def fake_request(method, url, headers=None, **kwargs):
    token = headers["Authorization"].split(" ", 1)[1]
    if url.endswith("/user/profile"):
        if token not in ACCOUNTS:
            return DummyResponse(status_code=401)
        return DummyResponse(json_obj={"data": ACCOUNTS[token]})
    if url.endswith("/user/check-in"):
        return DummyResponse(json_obj={"code": 0})
    raise requests.ConnectionError(url)


class TestCLI(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.log_file = os.path.join(self.tmp.name, "logs", "checkin.log")
        self.env_file = os.path.join(self.tmp.name, ".env")
        with open(self.env_file, "w", encoding="utf-8") as fh:
            fh.write("")
        self.env = patch.dict(os.environ, {"MAX_RETRIES": "2", "RETRY_BASE_DELAY": "0", "PROXY_URL": ""})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        self.tmp.cleanup()

    def base_args(self):
        return ["--no-banner", "--log-file", self.log_file, "--env-file", self.env_file]

    @patch("requests.Session.request")
    def test_no_tokens_exits_before_network(self, mock_request):
        code = checkin_cli.main(self.base_args() + ["--tokens", " , ,"])
        self.assertEqual(code, 1)
        mock_request.assert_not_called()

    @patch("obito_checkin.core.pacing.RandomPacing.wait")
    @patch("requests.Session.request", side_effect=fake_request)
    def test_full_run(self, mock_request, mock_wait):
        jsonl = os.path.join(self.tmp.name, "run.jsonl")
        tokens = "token-alpha-1, token-alpha-2,token-bravo-1,token-unknown"
        code = checkin_cli.main(self.base_args() + ["--tokens", tokens, "--jsonl-out", jsonl])
        self.assertEqual(code, 0)
        self.assertEqual(mock_wait.call_count, 4)

        with open(jsonl, encoding="utf-8") as fh:
            outcomes = [json.loads(line)["outcome"] for line in fh]
        self.assertEqual(outcomes, ["success", "duplicate", "already_checked_in", "invalid"])

        with open(self.log_file, encoding="utf-8") as fh:
            content = fh.read()
        entries = [json.loads(line) for line in content.splitlines()]
        summary = [e for e in entries if e["message"] == "Check-in completed"]
        self.assertEqual(len(summary), 1)
        self.assertEqual((summary[0]["success"], summary[0]["failed"], summary[0]["duplicates"]), (1, 1, 2))
        self.assertNotIn("token-unknown", content)

    @patch("obito_checkin.core.pacing.RandomPacing.wait", side_effect=RuntimeError("clock broke"))
    @patch("requests.Session.request", side_effect=fake_request)
    def test_fatal_error_exits_nonzero(self, mock_request, mock_wait):
        code = checkin_cli.main(self.base_args() + ["--tokens", "token-alpha-1"])
        self.assertEqual(code, 1)
        with open(self.log_file, encoding="utf-8") as fh:
            messages = [json.loads(line)["message"] for line in fh]
        self.assertIn("Bot crashed", messages)

    @patch("requests.Session.request", side_effect=KeyboardInterrupt)
    def test_interrupt_stops_spinner(self, mock_request):
        real_stop = checkin_cli.ConsoleUI.stop
        with patch.object(checkin_cli.ConsoleUI, "stop", autospec=True, side_effect=real_stop) as mock_stop:
            code = checkin_cli.main(self.base_args() + ["--tokens", "token-alpha-1"])
        self.assertEqual(code, 130)
        mock_stop.assert_called_once()

    @patch("obito_checkin.core.pacing.RandomPacing.wait", side_effect=RuntimeError("clock broke"))
    @patch("requests.Session.request", side_effect=fake_request)
    def test_fatal_error_verbose_prints_rich_traceback(self, mock_request, mock_wait):
        with patch.object(checkin_cli.console, "print_exception") as mock_print_exception:
            code = checkin_cli.main(self.base_args() + ["--tokens", "token-alpha-1", "--verbose"])
        self.assertEqual(code, 1)
        mock_print_exception.assert_called_once_with()

    def test_console_ui_stop(self):
        ui = checkin_cli.ConsoleUI(checkin_cli.ResultsHandler())
        ui.on_token_start(1, 1, "abcde")
        self.assertIsNotNone(ui._status)
        ui.stop()
        self.assertIsNone(ui._status)
        ui.stop()

    def test_describe_outcomes(self):
        from obito_checkin.core.models import TokenOutcome
        self.assertIn("Invalid token: abcde",
                      checkin_cli.ConsoleUI.describe(TokenOutcome(1, "abcde", "invalid")))
        self.assertIn("Duplicate account: Unknown",
                      checkin_cli.ConsoleUI.describe(TokenOutcome(1, "abcde", "duplicate", account_id=1)))
        self.assertIn("Error: boom",
                      checkin_cli.ConsoleUI.describe(TokenOutcome(1, "abcde", "failure", detail="boom")))


if __name__ == '__main__':
    unittest.main()
