"""
Minswap aggregator client for the verified token list.
"""

import logging
import time
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from .http_client import HttpClient, UpstreamError
from .models import Token

logger = logging.getLogger(__name__)


class MinswapClient:
    """Fetches verified tokens and their prices from the Minswap aggregator."""

    def __init__(self, url: str, timeout: float = 30.0, retry_delay: float = 5.0,
                 http: Optional[HttpClient] = None, sleep=time.sleep):
        self.url = url
        self._http = http or HttpClient(
            timeout,
            headers={'Content-Type': 'application/json'},
            retry_delay=retry_delay,
            sleep=sleep,
        )

    def fetch_tokens(
        self,
        stables: Iterable[str] = (),
        limit: int = 31,
        page_size: int = 20,
        max_pages: int = 3,
    ) -> Dict[str, Token]:
        """
        Walk the paginated token search and collect up to limit tokens.

        Tickers are upper-cased and de-duplicated; stablecoins are skipped.
        A page that fails after the single rate-limit retry ends the walk and
        whatever was collected so far is returned.

        Args:
            stables: Tickers to exclude
            limit: Maximum number of tokens
            page_size: Tokens requested per page
            max_pages: Maximum pages to request

        Returns:
            Ticker to Token mapping in listing order
        """
        stable_set = {s.upper() for s in stables}
        result: Dict[str, Token] = {}
        search_after = None

        for page in range(max_pages):
            payload = {'query': '', 'only_verified': True, 'limit': page_size}
            if search_after:
                payload['search_after'] = search_after

            try:
                data = self._http.post_json(self.url, payload, retry_on_rate_limit=True)
            except UpstreamError as e:
                logger.warning(f"Minswap page {page} failed: {e}")
                break

            if not isinstance(data, dict):
                break
            tokens = data.get('tokens') or []
            if not tokens:
                break

            for raw in tokens:
                if not isinstance(raw, dict):
                    continue
                ticker = str(raw.get('ticker') or '').upper()
                if not ticker or ticker in stable_set or ticker in result:
                    continue

                try:
                    token = Token(
                        ticker=ticker,
                        name=raw.get('project_name') or ticker,
                        price_ada=raw.get('price_by_ada'),
                        price_usd=raw.get('price_by_usd'),
                        token_id=raw.get('token_id') or '',
                        logo=raw.get('logo') or '',
                        decimals=raw.get('decimals') or 0,
                    )
                except ValidationError as e:
                    logger.warning(f"Skipping malformed Minswap token {ticker}: {e.error_count()} invalid field(s)")
                    continue
                result[ticker] = token

                if len(result) >= limit:
                    logger.debug(f"Collected {len(result)} tokens from Minswap")
                    return result

            search_after = data.get('search_after')
            if not search_after:
                break

        logger.debug(f"Collected {len(result)} tokens from Minswap")
        return result
