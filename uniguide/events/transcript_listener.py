"""
Transcript listener

Transcript writes trigger L3 once the student has a complete set: three
full-year sheets or six semester sheets.
"""

import logging
from typing import Any

from uniguide.domain.transcripts import TRANSCRIPT_BATCH_SIZES
from uniguide.events.schemas import EventSchemaError, TranscriptChangedEvent, parse_event
from uniguide.infrastructure.services.prediction_pipeline import PredictionPipeline

logger = logging.getLogger(__name__)


class TranscriptEventListener:
    """Handles transcript:created and transcript:updated messages."""

    def __init__(self, pipeline: PredictionPipeline):
        self._pipeline = pipeline

    async def handle_transcript_changed(self, raw: Any) -> None:
        parsed = parse_event(TranscriptChangedEvent, raw)
        if isinstance(parsed, EventSchemaError):
            logger.error(f"[EVENTS] Invalid transcript event: {parsed.describe()}")
            return

        event = parsed.payload
        count = len(event.transcript_ids)
        if count not in TRANSCRIPT_BATCH_SIZES:
            logger.info(
                f"[EVENTS] Student {event.student_id} has {count} transcript(s), "
                f"waiting for 3 or 6 before L3"
            )
            return

        try:
            status = await self._pipeline.run_tier_three(event.student_id, event.user_id)
            if status is not None:
                logger.info(f"[EVENTS] L3 for student {event.student_id} finished: {status.value}")
        except Exception as e:
            logger.exception(f"[EVENTS] L3 for student {event.student_id} failed: {e}")
