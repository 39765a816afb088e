"""
0x Swap API client (v2, allowance-holder) reached through a forwarding proxy

The proxy attaches the 0x API key and version headers, so this client sends
plain GET requests. The configured URL points at the proxy's quote endpoint;
the price endpoint is derived from it by swapping the trailing ``quote``
for ``price``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ...config import ZeroExConfig
from ...errors import ConfigError, UpstreamError
from ...types.quote import Price, Quote, QuoteRequest
from .shapes import normalize_price, normalize_quote

logger = logging.getLogger(__name__)


def _format_validation_errors(items: Any) -> List[str]:
    messages = []
    for item in items or []:
        if isinstance(item, dict):
            messages.append(f"{item.get('field')} {item.get('reason')}")
        else:
            messages.append(str(item))
    return messages


class ZeroExAPI:
    """
    0x quote/price client

    Provides:
    - Indicative price previews (get_price)
    - Executable quotes with settlement target and calldata (get_quote)

    Never retries: a failed request surfaces as UpstreamError right away.

    Usage:
        async with ZeroExAPI("https://proxy.example/swap/allowance-holder/quote") as api:
            quote = await api.get_quote(QuoteRequest(
                sell_token=wmon, buy_token=usdc, sell_amount=10**16, taker=account,
            ))
    """

    def __init__(
        self,
        proxy_url: str,
        quote_path: str = "quote",
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize 0x API client

        Args:
            proxy_url: Full URL of the proxy's quote endpoint
            quote_path: Suffix the proxy URL path must end with
            timeout: Request timeout in seconds
            client: Shared httpx.AsyncClient (not closed by this class)

        Raises:
            ConfigError: If the proxy URL is missing or does not end with quote_path
        """
        self._quote_url = self._validate_proxy_url(proxy_url, quote_path)
        self._price_url = self._derive_price_url(self._quote_url, quote_path)
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @staticmethod
    def _validate_proxy_url(proxy_url: str, quote_path: str) -> str:
        if not proxy_url:
            raise ConfigError.missing("ZEROX_PROXY_URL")

        try:
            url = httpx.URL(proxy_url)
        except httpx.InvalidURL as e:
            raise ConfigError.invalid("ZEROX_PROXY_URL", str(e))

        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigError.invalid("ZEROX_PROXY_URL", f"not an http(s) URL: {proxy_url}")

        expected = "/" + quote_path.strip("/")
        if not url.path.rstrip("/").endswith(expected):
            raise ConfigError.invalid(
                "ZEROX_PROXY_URL",
                f"path '{url.path}' must end with '{expected}'",
            )
        return str(url.copy_with(path=url.path.rstrip("/")))

    @staticmethod
    def _derive_price_url(quote_url: str, quote_path: str) -> str:
        url = httpx.URL(quote_url)
        last_segment = quote_path.strip("/").rsplit("/", 1)[-1]
        price_path = url.path[: -len(last_segment)] + "price"
        return str(url.copy_with(path=price_path))

    @property
    def quote_url(self) -> str:
        return self._quote_url

    @property
    def price_url(self) -> str:
        return self._price_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def _make_request(self, url: str, params: Dict[str, Any]) -> Any:
        """
        GET url and return the parsed JSON body

        Raises:
            UpstreamError: Transport failure, non-2xx status or unparseable body
        """
        client = self._get_client()
        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"0x API timeout: {url}")
            raise UpstreamError("0x API timeout", original_error=e)
        except httpx.RequestError as e:
            logger.warning(f"0x API request error: {e}")
            raise UpstreamError(f"0x API request error: {e}", original_error=e)

        text = response.text
        if not response.is_success:
            raise self._parse_error(response.status_code, text)

        try:
            return json.loads(text)
        except ValueError as e:
            raise UpstreamError(
                f"Could not parse 0x response (status {response.status_code})",
                status_code=response.status_code,
                original_error=e,
            )

    @staticmethod
    def _parse_error(status_code: int, text: str) -> UpstreamError:
        """Turn a non-2xx response into UpstreamError with the service's reason"""
        try:
            body = json.loads(text)
        except ValueError:
            body = None

        if not isinstance(body, dict):
            logger.warning(f"0x API error ({status_code}): {text[:500]}")
            return UpstreamError(f"0x API error ({status_code}): {text}", status_code=status_code)

        reason = body.get("reason")
        validation_errors = _format_validation_errors(body.get("validationErrors"))
        if validation_errors:
            detail = f"{reason or 'ValidationError'}: {', '.join(validation_errors)}"
        else:
            detail = reason or body.get("message") or text

        logger.warning(f"0x API error ({status_code}): {detail}")
        return UpstreamError(
            f"0x API error ({status_code}): {detail}",
            status_code=status_code,
            reason=reason,
            validation_errors=validation_errors,
        )

    async def get_price(self, request: QuoteRequest) -> Price:
        """
        Indicative price for a swap (no calldata)

        Raises:
            UpstreamError: The service rejected the request
            InvalidQuoteError: The response lacks a usable buyAmount
        """
        data = await self._make_request(self._price_url, request.to_params())
        price = normalize_price(data)
        logger.debug(f"0x price: {price.sell_amount} -> {price.buy_amount}")
        return price

    async def get_quote(self, request: QuoteRequest) -> Quote:
        """
        Executable quote (settlement target, calldata, allowance target)

        Raises:
            UpstreamError: The service rejected the request
            InvalidQuoteError: Target, calldata or amounts cannot be normalized
        """
        data = await self._make_request(self._quote_url, request.to_params())
        quote = normalize_quote(data)
        logger.info(f"0x quote: {quote}")
        return quote

    @classmethod
    def from_config(
        cls,
        config: ZeroExConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "ZeroExAPI":
        return cls(
            proxy_url=config.proxy_url,
            quote_path=config.quote_path,
            timeout=config.timeout,
            client=client,
        )

    async def aclose(self):
        """Close the HTTP client if this instance created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"ZeroExAPI(quote_url={self._quote_url})"
