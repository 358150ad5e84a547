"""
Commerce API client (WooCommerce REST v3).

Only one call is needed: fetch an order by id so the confirmation workflow
can check whether it has been paid.

Usage:
    commerce = CommerceClient(base_url, key, secret, timeout_seconds=30)
    order = commerce.get_order("1234")
    order["status"]  # "pending", "processing", "completed", ...
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import CommerceLookupError, UpstreamTimeoutError


class CommerceClient:
    """
    Read-only order lookup.

    Uses HTTP basic auth with the consumer key/secret pair, which the
    storefront accepts over HTTPS.
    """

    ORDERS_PATH = "/wp-json/wc/v3/orders/{order_id}"

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url.rstrip("/")
        self._auth = (consumer_key, consumer_secret)
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._logger = logger or logging.getLogger("print_prep.core.commerce_client")

    def get_order(self, order_id: str) -> Dict[str, Any]:
        """
        Fetch one order resource.

        Raises:
            CommerceLookupError: Not found, HTTP error or invalid JSON
            UpstreamTimeoutError: No response within the timeout
        """
        url = self._base_url + self.ORDERS_PATH.format(order_id=order_id)
        self._logger.debug(f"Fetching order {order_id}")

        try:
            response = self._session.get(url, auth=self._auth, timeout=self._timeout)
        except requests.Timeout:
            self._logger.error(f"Order lookup {order_id} timed out")
            raise UpstreamTimeoutError(f"Order lookup {order_id}", self._timeout)
        except requests.RequestException as exc:
            self._logger.error(f"Order lookup {order_id} failed: {exc}")
            raise CommerceLookupError(order_id, str(exc))

        if response.status_code == 404:
            raise CommerceLookupError(order_id, "order not found")
        if response.status_code >= 400:
            raise CommerceLookupError(order_id, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            order = response.json()
        except ValueError as exc:
            raise CommerceLookupError(order_id, f"invalid JSON response: {exc}")

        if not isinstance(order, dict):
            raise CommerceLookupError(order_id, "unexpected response shape")

        self._logger.info(f"Order {order_id} status: {order.get('status')}")
        return order
