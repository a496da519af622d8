"""
OCR score extraction

Transcript images are read by an external OCR service. The OCR listener only
depends on the OcrExtractor protocol; HttpOcrExtractor is the production
implementation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
from uuid import UUID

import httpx

from uniguide.config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreExtraction:
    """Outcome of extracting subject scores from one transcript file."""
    success: bool
    scores: List[Dict[str, Any]] = field(default_factory=list)
    grade: Optional[int] = None
    semester: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "ScoreExtraction":
        return cls(success=False, error=error)


class OcrExtractor(Protocol):
    async def extract(self, file_id: UUID, student_id: UUID) -> ScoreExtraction:
        ...


class HttpOcrExtractor:
    """
    Calls POST /extract on the OCR service.

    Expected response: {"success": bool, "scores": [{subject, score}],
    "grade": int?, "semester": int?, "error": str?}. Transport and HTTP errors
    come back as a failed extraction so the file can be marked FAILED.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.ocr_service_url).rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.ocr_timeout_seconds,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def extract(self, file_id: UUID, student_id: UUID) -> ScoreExtraction:
        try:
            response = await self._client.post(
                "/extract",
                json={"fileId": str(file_id), "studentId": str(student_id)},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"[OCR] File {file_id}: HTTP {e.response.status_code}")
            return ScoreExtraction.failed(f"OCR service returned HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"[OCR] File {file_id}: {e}")
            return ScoreExtraction.failed(f"OCR service request failed: {e}")
        except ValueError:
            return ScoreExtraction.failed("OCR service returned a non-JSON body")

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            return ScoreExtraction.failed(error or "OCR extraction failed")
        return ScoreExtraction(
            success=True,
            scores=list(body.get("scores") or []),
            grade=body.get("grade"),
            semester=body.get("semester"),
        )
