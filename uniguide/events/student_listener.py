"""
Student created listener

A new student profile triggers the L1/L2 prediction run.
"""

import logging
from typing import Any

from uniguide.events.schemas import EventSchemaError, StudentCreatedEvent, parse_event
from uniguide.infrastructure.services.prediction_pipeline import PredictionPipeline

logger = logging.getLogger(__name__)


class StudentEventListener:
    """Handles prediction:student_created messages."""

    def __init__(self, pipeline: PredictionPipeline):
        self._pipeline = pipeline

    async def handle_student_created(self, raw: Any) -> None:
        parsed = parse_event(StudentCreatedEvent, raw)
        if isinstance(parsed, EventSchemaError):
            logger.error(f"[EVENTS] Invalid student created event: {parsed.describe()}")
            return

        event = parsed.payload
        logger.info(f"[EVENTS] Student {event.student_id} created, starting L1/L2")
        try:
            status = await self._pipeline.run_tier_one_and_two(event.student_id, event.user_id)
            logger.info(f"[EVENTS] L1/L2 for student {event.student_id} finished: {status.value}")
        except Exception as e:
            logger.exception(f"[EVENTS] L1/L2 for student {event.student_id} failed: {e}")
