"""
Service wiring

Builds the prediction pipeline, its listeners and the pub/sub subscriber once
at startup. Components are passed explicitly; nothing is registered at import
time.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from uniguide.events.ocr_listener import OcrEventListener
from uniguide.events.registry import build_channel_bindings
from uniguide.events.student_listener import StudentEventListener
from uniguide.events.subscriber import EventSubscriberManager
from uniguide.events.transcript_listener import TranscriptEventListener
from uniguide.infrastructure.services.admission_linking_service import AdmissionLinkingService
from uniguide.infrastructure.services.batching import BatchPolicy
from uniguide.infrastructure.services.cache_invalidator import CacheInvalidator, create_redis_client
from uniguide.infrastructure.services.ocr_extractor import HttpOcrExtractor
from uniguide.infrastructure.services.prediction_client import PredictionClient
from uniguide.infrastructure.services.prediction_pipeline import PredictionPipeline
from uniguide.infrastructure.services.prediction_result_store import PredictionResultStore
from uniguide.infrastructure.services.student_snapshot_service import StudentSnapshotLoader
from uniguide.infrastructure.services.tier_one_service import TierOnePredictionService
from uniguide.infrastructure.services.tier_three_service import TierThreePredictionService
from uniguide.infrastructure.services.tier_two_service import TierTwoPredictionService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    redis: aioredis.Redis
    prediction_client: PredictionClient
    ocr_extractor: HttpOcrExtractor
    pipeline: PredictionPipeline
    subscriber: EventSubscriberManager

    async def redis_ok(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"[CACHE] Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self.subscriber.stop()
        await self.prediction_client.close()
        await self.ocr_extractor.close()
        await self.redis.aclose()


def build_container(
    redis_client: Optional[aioredis.Redis] = None,
    prediction_client: Optional[PredictionClient] = None,
    ocr_extractor: Optional[HttpOcrExtractor] = None,
) -> ServiceContainer:
    redis_client = redis_client or create_redis_client()
    prediction_client = prediction_client or PredictionClient()
    ocr_extractor = ocr_extractor or HttpOcrExtractor()
    policy = BatchPolicy.from_settings()

    store = PredictionResultStore()
    pipeline = PredictionPipeline(
        tier_one=TierOnePredictionService(prediction_client, policy),
        tier_two=TierTwoPredictionService(prediction_client, policy),
        tier_three=TierThreePredictionService(prediction_client, policy),
        store=store,
        snapshot_loader=StudentSnapshotLoader(),
        linking_service=AdmissionLinkingService(),
        cache_invalidator=CacheInvalidator(redis_client),
    )

    bindings = build_channel_bindings(
        student_listener=StudentEventListener(pipeline),
        transcript_listener=TranscriptEventListener(pipeline),
        ocr_listener=OcrEventListener(pipeline, ocr_extractor, store),
    )
    subscriber = EventSubscriberManager(redis_client, bindings)

    return ServiceContainer(
        redis=redis_client,
        prediction_client=prediction_client,
        ocr_extractor=ocr_extractor,
        pipeline=pipeline,
        subscriber=subscriber,
    )
