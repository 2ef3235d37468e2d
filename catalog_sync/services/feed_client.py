"""HTTP clients for the supplier product feeds."""

from typing import Any, Dict, Optional

import requests

from catalog_sync.config import Settings, settings
from catalog_sync.exceptions import ConfigurationError, FeedFetchError
from catalog_sync.models.enums import SupplierSource
from catalog_sync.utils.logger import logger

ERROR_BODY_LIMIT = 500


def mask_api_key(api_key: Optional[str]) -> str:
    """Keep only the first 8 and last 4 characters of a key for logging."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 12:
        return "***"
    return f"{api_key[:8]}...{api_key[-4:]}"


class FeedClient:
    """
    Base client fetching one supplier's complete product feed.

    Usage:
        with MidoceanFeedClient(base_url, api_key) as client:
            payload = client.fetch_products()
    """

    source: str = ""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        """
        Initialize the feed client.

        Args:
            timeout: Request timeout in seconds, None waits indefinitely
            session: Preconfigured requests session
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.session.close()

    def fetch_products(self) -> Any:
        """Fetch and decode the product feed."""
        raise NotImplementedError

    def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            FeedFetchError: On connection errors, non-2xx responses or an
                undecodable body
        """
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{self.source} feed request failed: {e}")
            raise FeedFetchError(self.source, f"{self.source} feed unreachable: {e}") from e

        logger.debug(f"{self.source} feed response: {response.status_code} {response.reason}")

        if not response.ok:
            message = f"{self.source} API error: {response.status_code} {response.reason}"
            body = (response.text or "").strip()
            if body:
                message += f" - {body[:ERROR_BODY_LIMIT]}"
            logger.error(message)
            raise FeedFetchError(self.source, message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise FeedFetchError(
                self.source,
                f"{self.source} feed returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e


class MidoceanFeedClient(FeedClient):
    """Client for the Midocean product gateway."""

    source = SupplierSource.MIDOCEAN.value
    PRODUCTS_ENDPOINT = "/gateway/products/2.0"

    def __init__(self, base_url: str, api_key: str, language: str = "en", **kwargs):
        """
        Initialize the Midocean client.

        Args:
            base_url: Gateway base URL for the test or production environment
            api_key: Gateway API key
            language: Feed language code
        """
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.language = language
        self.session.headers.update({
            "Accept": "application/json",
            "x-Gateway-APIKey": api_key,
        })

    def fetch_products(self) -> Any:
        """Fetch the full Midocean product feed."""
        url = f"{self.base_url}{self.PRODUCTS_ENDPOINT}"
        logger.info(f"Fetching Midocean products from {url} (key {mask_api_key(self.api_key)})")
        return self._get_json(url, params={"language": self.language})


class XDConnectsFeedClient(FeedClient):
    """Client for the XD Connects product data feed."""

    source = SupplierSource.XD_CONNECTS.value

    def __init__(self, product_data_url: str, **kwargs):
        """
        Initialize the XD Connects client.

        Args:
            product_data_url: Download URL of the product data feed
        """
        super().__init__(**kwargs)
        self.product_data_url = product_data_url
        self.session.headers.update({"Accept": "application/json"})

    def fetch_products(self) -> Any:
        """Fetch the full XD Connects product data feed."""
        logger.info("Fetching XD Connects product data feed")
        return self._get_json(self.product_data_url)


def build_feed_clients(config: Optional[Settings] = None) -> Dict[str, FeedClient]:
    """
    Build a client for every supplier that is configured.

    Suppliers without credentials or a feed URL are left out; asking for
    them later yields a supplier-level error.
    """
    config = config or settings
    clients: Dict[str, FeedClient] = {}

    if config.midocean_api_key:
        clients[SupplierSource.MIDOCEAN.value] = MidoceanFeedClient(
            base_url=config.midocean_base_url,
            api_key=config.midocean_api_key,
            timeout=config.feed_request_timeout,
        )
    else:
        logger.debug("MIDOCEAN_API_KEY not set, Midocean feed disabled")

    if config.xd_connects_product_data_url:
        clients[SupplierSource.XD_CONNECTS.value] = XDConnectsFeedClient(
            product_data_url=config.xd_connects_product_data_url,
            timeout=config.feed_request_timeout,
        )
    else:
        logger.debug("XD_CONNECTS_PRODUCT_DATA_URL not set, XD Connects feed disabled")

    return clients


def require_client(clients: Dict[str, FeedClient], source: str) -> FeedClient:
    """Return the client for a supplier or fail with a configuration error."""
    try:
        return clients[source]
    except KeyError:
        raise ConfigurationError(f"No feed client configured for supplier '{source}'") from None
