"""Remote inference provider: Replicate-hosted domain price model."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..errors import (
    BillingError,
    ConfigurationError,
    RATE_LIMIT_PATTERNS,
    RateLimitError,
    RemoteServiceError,
    RemoteTimeoutError,
    TransportError,
    UnprocessableDomainError,
    ValidationError,
    matches_any,
)
from .models import ValuationTiers, is_number

logger = logging.getLogger(__name__)

DEFAULT_MODEL_VERSION = 'a925db842c707850e4ca7b7e86b217692b0353a9ca05eb028802c4a85db93843'
PREDICTIONS_URL = 'https://api.replicate.com/v1/predictions'

TERMINAL_STATUSES = {'succeeded', 'failed', 'canceled'}

# Response shapes the provider has been seen to return
SHAPE_VALUATION_LIST = 'valuation_list'   # {"valuations": [{...}, ...]}
SHAPE_RECORD_LIST = 'record_list'         # [{...}, ...]
SHAPE_ESTIMATED_VALUE = 'estimated_value'  # {"estimated_value": 1234}
SHAPE_UNKNOWN = 'unknown'


@dataclass(frozen=True)
class RemoteEstimate:
    value: float
    tiers: Optional[ValuationTiers] = None


def response_shape(payload: Any) -> str:
    """Tag a provider payload with its shape."""
    if isinstance(payload, dict):
        if isinstance(payload.get('valuations'), list):
            return SHAPE_VALUATION_LIST
        if 'estimated_value' in payload:
            return SHAPE_ESTIMATED_VALUE
    elif isinstance(payload, list):
        return SHAPE_RECORD_LIST
    return SHAPE_UNKNOWN


def _estimate_from_records(records: List[Any]) -> RemoteEstimate:
    if not records or not isinstance(records[0], dict):
        raise ValidationError('response has no valuation records')
    record = records[0]
    value = record.get('marketplace')
    if not is_number(value) or value < 0:
        raise ValidationError('marketplace value missing or out of range')

    tiers = None
    auction = record.get('auction')
    brokerage = record.get('brokerage')
    if is_number(auction) and is_number(brokerage) and auction >= 0 and brokerage >= 0:
        tiers = ValuationTiers(auction=auction, marketplace=value, brokerage=brokerage)
    return RemoteEstimate(value=value, tiers=tiers)


def parse_valuation_response(payload: Any) -> RemoteEstimate:
    """Extract the market value from a provider payload or raise ValidationError."""
    shape = response_shape(payload)

    if shape == SHAPE_VALUATION_LIST:
        return _estimate_from_records(payload['valuations'])
    if shape == SHAPE_RECORD_LIST:
        return _estimate_from_records(payload)
    if shape == SHAPE_ESTIMATED_VALUE:
        value = payload['estimated_value']
        if not is_number(value) or value < 0:
            raise ValidationError('estimated_value missing or out of range')
        return RemoteEstimate(value=value)

    raise ValidationError(f'unrecognized response shape: {type(payload).__name__}')


class ReplicateValuationClient:
    """Async client for the Replicate predictions API.

    Built once per process and handed to the orchestrator; use as an async
    context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        api_token: Optional[str],
        model_version: str = DEFAULT_MODEL_VERSION,
        http_timeout: float = 10.0,
        poll_interval: float = 0.5,
        client: Optional[httpx.AsyncClient] = None
    ):
        if not api_token:
            raise ConfigurationError('REPLICATE_API_TOKEN is not set')
        self.model_version = model_version
        self.poll_interval = poll_interval
        self._client = client or httpx.AsyncClient(timeout=http_timeout)
        self._headers = {
            'Authorization': f'Bearer {api_token}',
            'Content-Type': 'application/json',
            'Prefer': 'wait',
        }

    async def __aenter__(self) -> 'ReplicateValuationClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _raise_for_status(self, response: httpx.Response, domain: str) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = f'HTTP {status}: {response.text[:200]}'
        if status == 429:
            raise RateLimitError(detail, domain=domain)
        if status == 402:
            raise BillingError(detail, domain=domain)
        if status == 422:
            raise UnprocessableDomainError(detail, domain=domain)
        raise RemoteServiceError(detail, domain=domain)

    async def _request(self, method: str, url: str, domain: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(str(e), domain=domain) from e
        except httpx.TransportError as e:
            raise TransportError(str(e), domain=domain) from e

        self._raise_for_status(response, domain)
        try:
            body = response.json()
        except ValueError as e:
            raise ValidationError('provider returned non-JSON body', domain=domain) from e
        if not isinstance(body, dict):
            raise ValidationError('provider returned a non-object body', domain=domain)
        return body

    def _failed_prediction(self, prediction: Dict[str, Any], domain: str) -> Exception:
        error_text = str(prediction.get('error') or prediction.get('status'))
        if matches_any(error_text, RATE_LIMIT_PATTERNS):
            return RateLimitError(error_text, domain=domain)
        return RemoteServiceError(error_text, domain=domain)

    async def predict(self, domain: str) -> Any:
        """Run the model for one domain and return its raw output."""
        prediction = await self._request(
            'POST',
            PREDICTIONS_URL,
            domain,
            json={'version': self.model_version, 'input': {'domains': domain}},
        )

        # Prefer: wait usually returns a finished prediction; poll otherwise
        while prediction.get('status') not in TERMINAL_STATUSES:
            poll_url = (prediction.get('urls') or {}).get('get')
            if not poll_url:
                raise ValidationError('prediction has no status url', domain=domain)
            await asyncio.sleep(self.poll_interval)
            prediction = await self._request('GET', poll_url, domain)

        if prediction['status'] != 'succeeded':
            raise self._failed_prediction(prediction, domain)

        output = prediction.get('output')
        if isinstance(output, str):
            try:
                output = json.loads(output)
            except ValueError as e:
                raise ValidationError('prediction output is not JSON', domain=domain) from e

        logger.debug("Prediction %s for %s succeeded", prediction.get('id'), domain)
        return output
