import unittest
from unittest.mock import patch

import requests

from obito_checkin.core.api_client import ApiResponseError, CheckInApiClient
from obito_checkin.core.descriptor_models import load_descriptor


class DummyResponse:
    def __init__(self, status_code=200, text=None, json_obj=None):
        self.status_code = status_code
        self._json = json_obj
        self._text = text if text is not None else ("{}" if json_obj is not None else "")

    @property
    def text(self):
        return self._text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON")
        return self._json


class TestCheckInApiClient(unittest.TestCase):
    def setUp(self):
        self.client = CheckInApiClient(load_descriptor())

    def tearDown(self):
        self.client.close()

    @patch("requests.Session.request")
    def test_profile_sends_bearer_and_timeout(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"data": {"id": 7, "name": "Kakashi"}})
        account = self.client.fetch_profile("tok-123")
        self.assertEqual(account, {"id": 7, "name": "Kakashi"})
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("GET", "https://api.hi-pin.com/api/v1/user/profile"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok-123")
        self.assertEqual(kwargs["timeout"], 10.0)
        self.assertNotIn("json", kwargs)

    @patch("requests.Session.request")
    def test_profile_without_data_returns_none(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"data": None, "msg": "unauthorized"})
        self.assertIsNone(self.client.fetch_profile("tok"))

    @patch("requests.Session.request")
    def test_check_in_posts_empty_json(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"code": 0})
        self.assertEqual(self.client.check_in("tok"), {"code": 0})
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "https://api.hi-pin.com/api/v1/user/check-in"))
        self.assertEqual(kwargs["json"], {})

    @patch("requests.Session.request")
    def test_non_2xx_raises_http_error(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=502, text="bad gateway")
        with self.assertRaises(requests.HTTPError) as ctx:
            self.client.fetch_profile("tok")
        self.assertEqual(ctx.exception.response.status_code, 502)

    @patch("requests.Session.request")
    def test_invalid_json_raises_request_exception(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=200, text="<html>")
        with self.assertRaises(ApiResponseError):
            self.client.fetch_profile("tok")

    def test_proxy_is_applied(self):
        client = CheckInApiClient(load_descriptor(), proxy_url="http://proxy:3128")
        try:
            self.assertEqual(client.session.proxies["https"], "http://proxy:3128")
            self.assertEqual(client.session.proxies["http"], "http://proxy:3128")
        finally:
            client.close()


if __name__ == '__main__':
    unittest.main()
