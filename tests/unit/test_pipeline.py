"""
Unit tests for PredictionPipeline.

The store is replaced by an in-memory fake that enforces the same status
transitions; tier services are AsyncMocks except in the end-to-end scenario,
which runs the real orchestrators against an httpx.MockTransport.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from uniguide.domain.enums import PredictionResultStatus
from uniguide.domain.prediction_models import (
    L1PredictResult,
    L2PredictResult,
    L3PredictionItem,
    L3PredictResult,
)
from uniguide.domain.prediction_status import can_transition, classify_tier_status
from uniguide.domain.transcripts import TranscriptSheet
from uniguide.infrastructure.db.models.prediction_result import ANONYMOUS_ACTOR, PredictionResult
from uniguide.infrastructure.exceptions import (
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
    PredictionServiceError,
    UnmappedValueError,
)
from uniguide.infrastructure.services.batching import BatchPolicy
from uniguide.infrastructure.services.prediction_client import PredictionClient
from uniguide.infrastructure.services.prediction_pipeline import PredictionPipeline, to_payload
from uniguide.infrastructure.services.prediction_result_store import apply_transition
from uniguide.infrastructure.services.student_snapshot_service import StudentSnapshot
from uniguide.infrastructure.services.tier_one_service import TierOnePredictionService
from uniguide.infrastructure.services.tier_three_service import TierThreePredictionService
from uniguide.infrastructure.services.tier_two_service import TierTwoPredictionService

L1_RESULTS = [L1PredictResult(loai_uu_tien="A", ma_xet_tuyen={"QSB-A01": 0.9})]
L2_RESULTS = [L2PredictResult(ma_xet_tuyen="QSB-A01", score=0.8)]


class FakeStore:
    """In-memory PredictionResultStore; a failing link step leaves the row untouched."""

    def __init__(self):
        self.rows = {}
        self.events = []
        self.session = object()

    async def resolve_actor(self, user_id):
        return "student@example.com" if user_id else ANONYMOUS_ACTOR

    async def create_processing(self, student_id, user_id, created_by, l1_results=None, l2_results=None):
        row = PredictionResult(
            id=uuid4(),
            student_id=student_id,
            user_id=user_id,
            status=PredictionResultStatus.PROCESSING,
            created_by=created_by,
            l1_results=l1_results,
            l2_results=l2_results,
        )
        self.rows[row.id] = row
        self.events.append("create")
        return row

    async def latest_for_student(self, student_id):
        rows = [
            row for row in self.rows.values()
            if row.student_id == student_id and row.status.is_terminal
        ]
        return rows[-1] if rows else None

    async def complete_tiers(self, result_id, l1_results, l2_results, updated_by, link=None):
        row = self.rows[result_id]
        status = classify_tier_status(l1_results, l2_results)
        self._check(row, status)
        if link is not None:
            await link(self.session)
        apply_transition(row, status)
        row.l1_results, row.l2_results, row.updated_by = l1_results, l2_results, updated_by
        self.events.append("complete")
        return status

    async def complete_tier_three(self, result_id, l3_results, updated_by, link=None):
        row = self.rows[result_id]
        status = classify_tier_status(row.l1_results, row.l2_results)
        self._check(row, status)
        if link is not None:
            await link(self.session)
        apply_transition(row, status)
        row.l3_results, row.updated_by = l3_results, updated_by
        self.events.append("complete")
        return status

    async def mark_failed(self, result_id, updated_by):
        row = self.rows.get(result_id)
        if row is None or PredictionResultStatus(row.status).is_terminal:
            return False
        apply_transition(row, PredictionResultStatus.FAILED)
        self.events.append("failed")
        return True

    @staticmethod
    def _check(row, status):
        if not can_transition(PredictionResultStatus(row.status), status):
            raise InvalidStatusTransitionError(row.id, row.status.value, status.value)


def semester_sheets():
    return [
        TranscriptSheet(grade, semester, {"toan": 8.0})
        for grade in (10, 11, 12)
        for semester in (1, 2)
    ]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def tiers():
    tier_one, tier_two, tier_three = MagicMock(), MagicMock(), MagicMock()
    tier_one.predict = AsyncMock(return_value=L1_RESULTS)
    tier_two.predict = AsyncMock(return_value=L2_RESULTS)
    tier_three.predict = AsyncMock(return_value=[])
    return tier_one, tier_two, tier_three


@pytest.fixture
def snapshot_loader(sample_profile):
    loader = MagicMock()
    loader.load = AsyncMock(return_value=StudentSnapshot(
        profile=sample_profile, manual_sheets=semester_sheets()
    ))
    return loader


@pytest.fixture
def linking():
    service = MagicMock()
    service.link_tier_results = AsyncMock(return_value=1)
    service.link_admission_ids = AsyncMock(return_value=1)
    return service


@pytest.fixture
def invalidator():
    mock = MagicMock()
    mock.invalidate_student = AsyncMock(return_value=4)
    return mock


@pytest.fixture
def pipeline(tiers, store, snapshot_loader, linking, invalidator):
    tier_one, tier_two, tier_three = tiers
    return PredictionPipeline(
        tier_one=tier_one,
        tier_two=tier_two,
        tier_three=tier_three,
        store=store,
        snapshot_loader=snapshot_loader,
        linking_service=linking,
        cache_invalidator=invalidator,
    )


def only_row(store):
    assert len(store.rows) == 1
    return next(iter(store.rows.values()))


# =============================================================================
# L1 + L2
# =============================================================================

class TestTierOneAndTwo:

    async def test_completed_run(self, pipeline, store, linking, invalidator, sample_profile):
        student_id, user_id = sample_profile.student_id, uuid4()

        status = await pipeline.run_tier_one_and_two(student_id, user_id)

        assert status == PredictionResultStatus.COMPLETED
        row = only_row(store)
        assert row.status == PredictionResultStatus.COMPLETED
        assert row.l1_results == to_payload(L1_RESULTS)
        assert row.l2_results == to_payload(L2_RESULTS)
        assert row.created_by == "student@example.com"
        linking.link_tier_results.assert_awaited_once_with(
            store.session, sample_profile, L1_RESULTS, L2_RESULTS, "student@example.com"
        )
        invalidator.invalidate_student.assert_awaited_once_with(student_id, user_id)

    async def test_row_created_before_any_tier_call(self, pipeline, store, tiers, sample_profile):
        tier_one, _, _ = tiers

        async def predict(profile):
            assert store.events == ["create"]
            return L1_RESULTS

        tier_one.predict.side_effect = predict
        await pipeline.run_tier_one_and_two(sample_profile.student_id)

    async def test_failing_tier_gives_partial(self, pipeline, store, tiers, sample_profile):
        tier_one, _, _ = tiers
        tier_one.predict.side_effect = PredictionServiceError("timed out", tier="L1")

        status = await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert status == PredictionResultStatus.PARTIAL
        row = only_row(store)
        assert row.l1_results == []
        assert row.l2_results == to_payload(L2_RESULTS)

    async def test_empty_tiers_give_failed(self, pipeline, store, tiers, sample_profile):
        tier_one, tier_two, _ = tiers
        tier_one.predict.return_value = []
        tier_two.predict.side_effect = InvalidInputError("no scenarios", tier="L2")

        status = await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert status == PredictionResultStatus.FAILED
        assert only_row(store).l2_results == []

    async def test_unmapped_value_fails_the_run(self, pipeline, store, tiers, invalidator, sample_profile):
        _, tier_two, _ = tiers
        tier_two.predict.side_effect = UnmappedValueError("talent subject", "Toán")

        with pytest.raises(UnmappedValueError):
            await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert only_row(store).status == PredictionResultStatus.FAILED
        invalidator.invalidate_student.assert_not_awaited()

    async def test_missing_student(self, pipeline, store, tiers, snapshot_loader, sample_profile):
        tier_one, tier_two, _ = tiers
        snapshot_loader.load.side_effect = NotFoundError("Student not found")

        with pytest.raises(NotFoundError):
            await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert only_row(store).status == PredictionResultStatus.FAILED
        tier_one.predict.assert_not_awaited()
        tier_two.predict.assert_not_awaited()

    async def test_link_failure_marks_failed(self, pipeline, store, linking, sample_profile):
        linking.link_tier_results.side_effect = RuntimeError("constraint violation")

        with pytest.raises(RuntimeError):
            await pipeline.run_tier_one_and_two(sample_profile.student_id)

        row = only_row(store)
        assert row.status == PredictionResultStatus.FAILED
        assert row.l1_results is None

    async def test_mark_failed_error_does_not_mask_original(self, pipeline, store, snapshot_loader, sample_profile):
        snapshot_loader.load.side_effect = NotFoundError("Student not found")
        store.mark_failed = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(NotFoundError):
            await pipeline.run_tier_one_and_two(sample_profile.student_id)

    async def test_cache_failure_is_ignored(self, pipeline, invalidator, sample_profile):
        invalidator.invalidate_student.side_effect = RuntimeError("redis down")
        status = await pipeline.run_tier_one_and_two(sample_profile.student_id)
        assert status == PredictionResultStatus.COMPLETED

    async def test_without_invalidator(self, tiers, store, snapshot_loader, linking, sample_profile):
        tier_one, tier_two, tier_three = tiers
        pipeline = PredictionPipeline(tier_one, tier_two, tier_three, store, snapshot_loader, linking)
        assert await pipeline.run_tier_one_and_two(sample_profile.student_id) == PredictionResultStatus.COMPLETED


# =============================================================================
# L3
# =============================================================================

def l3_result(admission_id):
    return L3PredictResult(result={"QSB": [L3PredictionItem(
        best_to_hop=["A01"],
        best_to_hop_score=25.5,
        bonus_points=0,
        diem_chuan=24.0,
        ma_nganh="7480101",
        nhom_nganh=748,
        ten_nganh="Khoa học máy tính",
        total_score=25.5,
        id=str(admission_id),
    )]})


class TestTierThree:

    async def test_no_previous_run(self, pipeline, store, tiers, sample_profile):
        _, _, tier_three = tiers
        assert await pipeline.run_tier_three(sample_profile.student_id) is None
        assert store.rows == {}
        tier_three.predict.assert_not_awaited()

    async def test_new_row_carries_previous_tiers(self, pipeline, store, tiers, linking, sample_profile):
        _, _, tier_three = tiers
        student_id = sample_profile.student_id
        await pipeline.run_tier_one_and_two(student_id)
        admission_id = uuid4()
        tier_three.predict.return_value = [l3_result(admission_id)]

        status = await pipeline.run_tier_three(student_id)

        assert status == PredictionResultStatus.COMPLETED
        first, second = store.rows.values()
        assert second.id != first.id
        assert second.l1_results == first.l1_results
        assert second.l3_results == to_payload([l3_result(admission_id)])
        linking.link_admission_ids.assert_awaited_once_with(
            store.session, student_id, [admission_id], ANONYMOUS_ACTOR
        )
        profile, transcript = tier_three.predict.await_args.args
        assert transcript.grade_11.toan == 8.0

    async def test_in_flight_run_is_not_used_as_base(self, pipeline, store, tiers, sample_profile):
        _, _, tier_three = tiers
        student_id = sample_profile.student_id
        await pipeline.run_tier_one_and_two(student_id)
        finished = list(store.rows.values())[0]
        await store.create_processing(student_id, None, ANONYMOUS_ACTOR)
        tier_three.predict.return_value = [l3_result(uuid4())]

        status = await pipeline.run_tier_three(student_id)

        assert status == PredictionResultStatus.COMPLETED
        latest = list(store.rows.values())[-1]
        assert latest.l1_results == finished.l1_results
        assert latest.l2_results == finished.l2_results

    async def test_status_follows_previous_partial(self, pipeline, store, tiers, sample_profile):
        tier_one, _, _ = tiers
        tier_one.predict.return_value = []
        await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert await pipeline.run_tier_three(sample_profile.student_id) == PredictionResultStatus.PARTIAL

    async def test_incomplete_transcript_fails(self, pipeline, store, tiers, snapshot_loader, sample_profile):
        _, _, tier_three = tiers
        await pipeline.run_tier_one_and_two(sample_profile.student_id)
        snapshot_loader.load.return_value = StudentSnapshot(
            profile=sample_profile, manual_sheets=semester_sheets()[:4]
        )

        with pytest.raises(InvalidInputError):
            await pipeline.run_tier_three(sample_profile.student_id)

        latest = list(store.rows.values())[-1]
        assert latest.status == PredictionResultStatus.FAILED
        tier_three.predict.assert_not_awaited()

    async def test_ocr_sheets_used_without_manual_transcript(self, pipeline, tiers, snapshot_loader, sample_profile):
        _, _, tier_three = tiers
        await pipeline.run_tier_one_and_two(sample_profile.student_id)
        snapshot_loader.load.return_value = StudentSnapshot(
            profile=sample_profile,
            ocr_sheets=[TranscriptSheet(grade, None, {"van": 7.5}) for grade in (10, 11, 12)],
        )

        await pipeline.run_tier_three(sample_profile.student_id)

        _, transcript = tier_three.predict.await_args.args
        assert transcript.grade_12.van == 7.5


# =============================================================================
# End to end with the real orchestrators
# =============================================================================

class TestEndToEnd:

    async def test_l1_timeout_yields_partial(self, store, snapshot_loader, linking, sample_profile):
        def handler(request):
            if request.url.path.startswith("/calculate/l1"):
                raise httpx.ReadTimeout("timed out", request=request)
            items = json.loads(request.content)["items"]
            return httpx.Response(200, json=[
                [{"ma_xet_tuyen": f"QSB-{item['to_hop_mon']}", "score": 0.7}] for item in items
            ])

        http_client = httpx.AsyncClient(base_url="http://prediction.test", transport=httpx.MockTransport(handler))
        client = PredictionClient(base_url="http://prediction.test", http_client=http_client)
        policy = BatchPolicy(
            max_retries=1,
            retry_base_delay=0,
            retry_max_delay=0,
            request_delay=0,
            chunk_delay=0,
            retry_iteration_delay=0,
        )
        pipeline = PredictionPipeline(
            tier_one=TierOnePredictionService(client, policy),
            tier_two=TierTwoPredictionService(client, policy),
            tier_three=TierThreePredictionService(client, policy),
            store=store,
            snapshot_loader=snapshot_loader,
            linking_service=linking,
        )

        status = await pipeline.run_tier_one_and_two(sample_profile.student_id)

        assert status == PredictionResultStatus.PARTIAL
        row = only_row(store)
        assert row.l1_results == []
        assert sorted(r["ma_xet_tuyen"] for r in row.l2_results) == [
            "QSB-A01", "QSB-C01", "QSB-D01", "QSB-D11",
        ]
        await client.close()
