"""Inventory recommendation collaborator (HTTP)."""
import asyncio
import logging
from typing import Optional

import requests

from easystock.config import Config
from easystock.exceptions import BusinessLogicError
from easystock.services.report_service import build_sales_summary, build_stock_levels

logger = logging.getLogger(__name__)


class RecommendationClient:
    """Client for the inventory recommendation endpoint."""

    def __init__(self, url: Optional[str] = None, token: Optional[str] = None, config=Config):
        """
        Initialize recommendation client.

        Args:
            url: Endpoint URL. If None, reads Config.RECOMMENDATIONS_URL
            token: Bearer token. If None, reads Config.RECOMMENDATIONS_TOKEN
        """
        self.url = url or config.RECOMMENDATIONS_URL
        if not self.url:
            raise ValueError("RECOMMENDATIONS_URL is required")

        self.timeout = config.RECOMMENDATIONS_TIMEOUT
        self.headers = {'Content-Type': 'application/json'}
        token = token or config.RECOMMENDATIONS_TOKEN
        if token:
            self.headers['Authorization'] = f'Bearer {token}'

    def get_recommendations(self, sales_data: str, stock_levels: str) -> str:
        """
        Request restocking/promotion advice.

        Args:
            sales_data: JSON object of units sold per product name
            stock_levels: JSON list of {name, quantity, lowStockThreshold}

        Returns:
            Free-text recommendations, uninterpreted

        Raises:
            requests.HTTPError: If the endpoint returns an error
        """
        payload = {'salesData': sales_data, 'stockLevels': stock_levels}
        logger.info(f"[RECOMMEND] Requesting recommendations from {self.url}")

        try:
            response = requests.post(self.url, json=payload, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"[RECOMMEND] ✗ Endpoint error: {e.response.text}")
            raise

        return response.json().get('recommendations', '')


async def generate_recommendations(store, client: RecommendationClient) -> str:
    """
    Gather stock and sales inputs from the store and ask for recommendations.

    Raises:
        BusinessLogicError: no products or no sales recorded yet
    """
    products = await store.list_products()
    sales = await store.list_sales()
    if not products or not sales:
        raise BusinessLogicError('More sales and stock data is needed to generate recommendations')

    return await asyncio.to_thread(
        client.get_recommendations, build_sales_summary(sales), build_stock_levels(products)
    )
