"""
Prediction Service Client

Thin async client for the external admission prediction service. Each tier
has a single and a batch endpoint:

    POST /calculate/l1          POST /calculate/l1/batch?concurrency=N
    POST /calculate/l2          POST /calculate/l2/batch?concurrency=N
    POST /calculate/l3          POST /calculate/l3/batch?concurrency=N

Responses are validated against the wire models before they are returned.
The client never retries; the tier orchestrators decide what to do with a
PredictionServiceError.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from uniguide.config.settings import settings
from uniguide.domain.prediction_models import (
    L1PredictRequest,
    L1PredictResult,
    L2PredictRequest,
    L2PredictResult,
    L3PredictRequest,
    L3PredictResult,
)
from uniguide.infrastructure.exceptions import (
    PredictionResponseError,
    PredictionServiceError,
)

logger = logging.getLogger(__name__)


L1_RESPONSE = TypeAdapter(List[L1PredictResult])
L1_BATCH_RESPONSE = TypeAdapter(List[List[L1PredictResult]])
L2_RESPONSE = TypeAdapter(List[L2PredictResult])
L2_BATCH_RESPONSE = TypeAdapter(List[List[L2PredictResult]])
L3_RESPONSE = TypeAdapter(L3PredictResult)
L3_BATCH_RESPONSE = TypeAdapter(List[L3PredictResult])


def format_error_detail(body: Any) -> str:
    """
    Human readable error from a service error body.

    FastAPI validation errors ({"detail": [{"loc": [...], "msg": ...}]}) are
    flattened to "body.field - message; ...".
    """
    if not isinstance(body, dict):
        return str(body)
    detail = body.get("detail")
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if not isinstance(item, dict):
                parts.append(str(item))
                continue
            loc = ".".join(str(part) for part in item.get("loc", []))
            parts.append(f"{loc} - {item.get('msg', 'invalid')}")
        return "; ".join(parts)
    if detail is not None:
        return str(detail)
    return str(body.get("message", body))


class PredictionClient:
    """
    Client for the tiered prediction endpoints.

    Owns one httpx.AsyncClient for connection reuse; pass `http_client` to
    inject a preconfigured one (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.prediction_service_url).rstrip("/")
        self.timeout = timeout or settings.prediction_timeout_seconds
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # Tier 1
    # =========================================================================

    async def predict_l1(self, payload: L1PredictRequest) -> List[L1PredictResult]:
        return await self._post("L1", "/calculate/l1", _dump(payload), L1_RESPONSE)

    async def predict_l1_batch(
        self,
        payloads: Sequence[L1PredictRequest],
        concurrency: Optional[int] = None,
    ) -> List[L1PredictResult]:
        nested = await self._post_batch("L1", "/calculate/l1/batch", payloads, concurrency, L1_BATCH_RESPONSE)
        return [result for group in nested for result in group]

    # =========================================================================
    # Tier 2
    # =========================================================================

    async def predict_l2(self, payload: L2PredictRequest) -> List[L2PredictResult]:
        return await self._post("L2", "/calculate/l2", _dump(payload), L2_RESPONSE)

    async def predict_l2_batch(
        self,
        payloads: Sequence[L2PredictRequest],
        concurrency: Optional[int] = None,
    ) -> List[L2PredictResult]:
        nested = await self._post_batch("L2", "/calculate/l2/batch", payloads, concurrency, L2_BATCH_RESPONSE)
        return [result for group in nested for result in group]

    # =========================================================================
    # Tier 3
    # =========================================================================

    async def predict_l3(self, payload: L3PredictRequest) -> L3PredictResult:
        return await self._post("L3", "/calculate/l3", _dump(payload), L3_RESPONSE)

    async def predict_l3_batch(
        self,
        payloads: Sequence[L3PredictRequest],
        concurrency: Optional[int] = None,
    ) -> List[L3PredictResult]:
        return await self._post_batch("L3", "/calculate/l3/batch", payloads, concurrency, L3_BATCH_RESPONSE)

    async def health_check(self) -> bool:
        """True when the service answers GET /health with a 2xx."""
        try:
            response = await self._client.get("/health")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"[PREDICTION] Health check failed: {e}")
            return False

    # =========================================================================
    # Transport
    # =========================================================================

    async def _post_batch(
        self,
        tier: str,
        path: str,
        payloads: Sequence[BaseModel],
        concurrency: Optional[int],
        adapter: TypeAdapter,
    ) -> Any:
        params = {"concurrency": concurrency} if concurrency else None
        body = {"items": [_dump(payload) for payload in payloads]}
        return await self._post(tier, path, body, adapter, params=params)

    async def _post(
        self,
        tier: str,
        path: str,
        body: Dict[str, Any],
        adapter: TypeAdapter,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        operation = f"POST {path}"
        try:
            response = await self._client.post(path, json=body, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                detail = format_error_detail(e.response.json())
            except ValueError:
                detail = e.response.text[:500]
            logger.warning(f"[PREDICTION] {tier} {operation} returned HTTP {status_code}: {detail}")
            raise PredictionServiceError(
                f"{tier} prediction failed with HTTP {status_code}: {detail}",
                tier=tier,
                operation=operation,
                status_code=status_code,
                original_error=e,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning(f"[PREDICTION] {tier} {operation} timed out after {self.timeout}s")
            raise PredictionServiceError(
                f"{tier} prediction timed out",
                tier=tier,
                operation=operation,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"[PREDICTION] {tier} {operation} transport error: {e}")
            raise PredictionServiceError(
                f"{tier} prediction request failed: {e}",
                tier=tier,
                operation=operation,
                original_error=e,
            ) from e

        try:
            return adapter.validate_python(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"[PREDICTION] {tier} {operation} returned an invalid body: {e}")
            raise PredictionResponseError(
                f"{tier} prediction response failed validation",
                tier=tier,
                operation=operation,
                status_code=response.status_code,
                original_error=e,
            ) from e


def _dump(payload: BaseModel) -> Dict[str, Any]:
    return payload.model_dump(mode="json", exclude_none=True)
