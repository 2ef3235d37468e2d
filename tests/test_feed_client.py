"""Tests for the supplier feed HTTP clients."""

from unittest.mock import Mock

import pytest
import requests

from catalog_sync.exceptions import ConfigurationError, FeedFetchError
from catalog_sync.services.feed_client import (
    MidoceanFeedClient,
    XDConnectsFeedClient,
    build_feed_clients,
    mask_api_key,
    require_client,
)


def mock_session(status_code=200, json_data=None, text="", json_error=None, request_error=None):
    """requests.Session stand-in returning one canned response."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    if request_error is not None:
        session.get.side_effect = request_error
        return session

    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = "OK" if response.ok else "Service Unavailable"
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    session.get.return_value = response
    return session


class TestMidoceanFeedClient:
    """Test MidoceanFeedClient."""

    def test_fetch_products(self):
        """Test the gateway URL, headers and decoded payload."""
        session = mock_session(json_data=[{"master_code": "AR1249"}])
        client = MidoceanFeedClient("https://apitest.midocean.com/", "abcdefgh12345678", session=session, timeout=30)

        assert client.fetch_products() == [{"master_code": "AR1249"}]

        session.get.assert_called_once_with(
            "https://apitest.midocean.com/gateway/products/2.0",
            params={"language": "en"},
            timeout=30,
        )
        assert session.headers["x-Gateway-APIKey"] == "abcdefgh12345678"
        assert session.headers["Accept"] == "application/json"

    def test_error_status(self):
        """Test a non-2xx response raises with status and body."""
        session = mock_session(status_code=503, text="gateway down")
        client = MidoceanFeedClient("https://apitest.midocean.com", "key", session=session)

        with pytest.raises(FeedFetchError) as exc_info:
            client.fetch_products()

        assert exc_info.value.status_code == 503
        assert exc_info.value.source == "midocean"
        assert "503" in str(exc_info.value)
        assert "gateway down" in str(exc_info.value)

    def test_connection_error(self):
        """Test connection failures raise FeedFetchError."""
        session = mock_session(request_error=requests.ConnectionError("refused"))
        client = MidoceanFeedClient("https://apitest.midocean.com", "key", session=session)

        with pytest.raises(FeedFetchError):
            client.fetch_products()

    def test_invalid_json(self):
        """Test an undecodable body raises FeedFetchError."""
        session = mock_session(json_error=ValueError("Expecting value"))
        client = MidoceanFeedClient("https://apitest.midocean.com", "key", session=session)

        with pytest.raises(FeedFetchError):
            client.fetch_products()


class TestXDConnectsFeedClient:
    """Test XDConnectsFeedClient."""

    def test_fetch_products(self):
        """Test the feed URL is fetched as-is."""
        session = mock_session(json_data=[{"ItemCode": "P436.979"}])
        client = XDConnectsFeedClient("https://feeds.example.com/products.json", session=session)

        assert client.fetch_products() == [{"ItemCode": "P436.979"}]
        session.get.assert_called_once_with(
            "https://feeds.example.com/products.json", params=None, timeout=None
        )


class TestClientConfiguration:
    """Test building clients from settings."""

    def test_mask_api_key(self):
        """Test only the first 8 and last 4 characters are kept."""
        assert mask_api_key("abcdefgh12345678wxyz") == "abcdefgh...wxyz"
        assert mask_api_key("short") == "***"
        assert mask_api_key(None) == "<none>"

    def test_build_only_configured(self, test_settings):
        """Test unconfigured suppliers get no client."""
        assert build_feed_clients(test_settings) == {}

        test_settings.midocean_api_key = "abcdefgh12345678"
        test_settings.midocean_environment = "production"
        test_settings.xd_connects_product_data_url = "https://feeds.example.com/products.json"
        test_settings.feed_request_timeout = 60

        clients = build_feed_clients(test_settings)

        assert set(clients) == {"midocean", "xd-connects"}
        assert clients["midocean"].base_url == "https://api.midocean.com"
        assert clients["midocean"].timeout == 60

    def test_require_client(self):
        """Test asking for a missing client."""
        with pytest.raises(ConfigurationError):
            require_client({}, "midocean")
