"""
OCR listener

Uploaded transcript files are OCR'd one by one. After a batch finishes, the
student's COMPLETED OCR results are counted; exactly 3 or 6 form a complete
transcript set and trigger L3 through the OCR batch completed handler.
"""

import logging
from typing import Any, List, Optional, Tuple
from uuid import UUID

from uniguide.domain.transcripts import TRANSCRIPT_BATCH_SIZES
from uniguide.events.schemas import (
    EventSchemaError,
    FileCreatedEvent,
    OcrBatchCompletedEvent,
    parse_event,
)
from uniguide.infrastructure.db.database import get_session_context
from uniguide.infrastructure.db.repositories.ocr_result_repository import OcrResultRepository
from uniguide.infrastructure.services.ocr_extractor import OcrExtractor, ScoreExtraction
from uniguide.infrastructure.services.prediction_pipeline import PredictionPipeline
from uniguide.infrastructure.services.prediction_result_store import (
    PredictionResultStore,
    SessionScope,
)

logger = logging.getLogger(__name__)


class OcrEventListener:
    """Handles ocr:file_created messages and the internal OCR batch completed event."""

    def __init__(
        self,
        pipeline: PredictionPipeline,
        extractor: OcrExtractor,
        store: PredictionResultStore,
        session_scope: SessionScope = get_session_context,
    ):
        self._pipeline = pipeline
        self._extractor = extractor
        self._store = store
        self._session_scope = session_scope

    async def handle_file_created(self, raw: Any) -> None:
        parsed = parse_event(FileCreatedEvent, raw)
        if isinstance(parsed, EventSchemaError):
            logger.error(f"[OCR] Invalid file created event: {parsed.describe()}")
            return

        event = parsed.payload
        try:
            await self._process_files(event)
        except Exception as e:
            logger.exception(f"[OCR] Processing files for student {event.student_id} failed: {e}")

    async def handle_ocr_batch_completed(self, raw: Any) -> None:
        parsed = parse_event(OcrBatchCompletedEvent, raw)
        if isinstance(parsed, EventSchemaError):
            logger.error(f"[OCR] Invalid OCR batch completed event: {parsed.describe()}")
            return

        event = parsed.payload
        logger.info(
            f"[OCR] {len(event.ocr_result_ids)} OCR result(s) complete for student "
            f"{event.student_id}, starting L3"
        )
        try:
            status = await self._pipeline.run_tier_three(event.student_id, event.user_id)
            if status is not None:
                logger.info(f"[OCR] L3 for student {event.student_id} finished: {status.value}")
        except Exception as e:
            logger.exception(f"[OCR] L3 for student {event.student_id} failed: {e}")

    # =========================================================================
    # Steps
    # =========================================================================

    async def _process_files(self, event: FileCreatedEvent) -> None:
        actor = await self._store.resolve_actor(event.user_id)
        pending = await self._create_pending(event.student_id, event.all_file_ids, actor)
        if not pending:
            logger.info(f"[OCR] No new files for student {event.student_id}")
            return

        completed_count = 0
        for ocr_result_id, file_id in pending:
            if await self._extract(ocr_result_id, file_id, event.student_id):
                completed_count += 1

        if completed_count == 0:
            logger.warning(f"[OCR] No file of this batch was extracted for student {event.student_id}")
            return
        await self._check_completion(event.student_id, event.user_id)

    async def _create_pending(
        self,
        student_id: UUID,
        file_ids: List[UUID],
        actor: str,
    ) -> List[Tuple[UUID, UUID]]:
        """PROCESSING rows for files that have no OCR result yet."""
        created: List[Tuple[UUID, UUID]] = []
        async with self._session_scope() as session:
            repo = OcrResultRepository(session)
            existing = {result.file_id for result in await repo.get_by_file_ids(file_ids)}
            for file_id in file_ids:
                if file_id in existing:
                    logger.info(f"[OCR] File {file_id} already has an OCR result, skipping")
                    continue
                ocr_result = await repo.create_pending(student_id, file_id, actor)
                created.append((ocr_result.id, file_id))
        return created

    async def _extract(self, ocr_result_id: UUID, file_id: UUID, student_id: UUID) -> bool:
        """OCR one file and record the outcome. True when the result is COMPLETED."""
        try:
            extraction = await self._extractor.extract(file_id, student_id)
        except Exception as e:
            logger.error(f"[OCR] Extraction of file {file_id} raised: {e}")
            extraction = ScoreExtraction.failed(str(e) or e.__class__.__name__)

        async with self._session_scope() as session:
            repo = OcrResultRepository(session)
            if extraction.success:
                await repo.mark_completed(
                    ocr_result_id, extraction.scores, extraction.grade, extraction.semester
                )
                logger.info(f"[OCR] File {file_id}: {len(extraction.scores)} score(s) extracted")
                return True

            await repo.mark_failed(ocr_result_id, extraction.error or "OCR extraction failed")
            logger.warning(f"[OCR] File {file_id} failed: {extraction.error}")
            return False

    async def _check_completion(self, student_id: UUID, user_id: Optional[UUID]) -> None:
        async with self._session_scope() as session:
            completed = await OcrResultRepository(session).list_completed(student_id)

        if len(completed) not in TRANSCRIPT_BATCH_SIZES:
            logger.debug(
                f"[OCR] Student {student_id} has {len(completed)} completed OCR result(s), "
                f"waiting for 3 or 6"
            )
            return

        event = OcrBatchCompletedEvent(
            student_id=student_id,
            ocr_result_ids=[result.id for result in completed],
            user_id=user_id,
        )
        await self.handle_ocr_batch_completed(event.model_dump(mode="json", by_alias=True))
