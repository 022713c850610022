"""PHIVOLCS Client - Imperative Shell.

This module handles HTTP communication with the PHIVOLCS latest
earthquake page. All I/O is contained here; table parsing is in the
core module.
"""

import logging

import requests

from src.core.config import PHIVOLCS_BASE_URL
from src.core.earthquake import QuakeRecord, parse_quake_table


logger = logging.getLogger(__name__)


# Default timeout for page requests (seconds)
DEFAULT_TIMEOUT = 30

# Default maximum number of table rows to parse
DEFAULT_PARSE_LIMIT = 500

# The site serves a plain page to browser-like clients
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)


class PhivolcsClient:
    """Client for fetching the PHIVOLCS latest earthquake table.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = PHIVOLCS_BASE_URL,
        timeout: int = DEFAULT_TIMEOUT,
        verify_tls: bool = True,
    ) -> None:
        """Initialize PHIVOLCS client.

        Args:
            base_url: PHIVOLCS site root (also the page URL)
            timeout: Request timeout in seconds
            verify_tls: Verify the site's TLS certificate
        """
        self.base_url = base_url
        self.timeout = timeout
        self.verify_tls = verify_tls

    def fetch_page(self) -> str:
        """Fetch the latest earthquake page HTML.

        This method performs HTTP I/O.

        Returns:
            Raw page HTML

        Raises:
            requests.RequestException: If the request fails
        """
        logger.info("Fetching quake table from %s", self.base_url)

        response = requests.get(
            self.base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=self.timeout,
            verify=self.verify_tls,
        )
        response.raise_for_status()

        return response.text

    def fetch_quakes(self, limit: int = DEFAULT_PARSE_LIMIT) -> list[QuakeRecord]:
        """Fetch and parse the latest quakes.

        Args:
            limit: Maximum number of rows to parse

        Returns:
            Quake records, newest first

        Raises:
            requests.RequestException: If the request fails
            QuakeTableError: If the page has no quake table
        """
        html = self.fetch_page()

        # Pure core function
        quakes = parse_quake_table(html, self.base_url, limit)

        logger.info("Parsed %d quakes from PHIVOLCS", len(quakes))
        return quakes
