"""
Unit tests for AdmissionLinkingService with patched repositories.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from uniguide.domain.prediction_models import L1PredictResult, L2PredictResult
from uniguide.infrastructure.db.models.admission import Admission
from uniguide.infrastructure.services.admission_linking_service import (
    AdmissionLinkingService,
    collect_admission_codes,
)

MODULE = "uniguide.infrastructure.services.admission_linking_service"


def make_admission(code, subject_combination="A01", province="Thành phố Hồ Chí Minh", uni_type="Công lập"):
    return Admission(
        id=uuid4(),
        admission_code=code,
        subject_combination=subject_combination,
        province=province,
        uni_type=uni_type,
    )


@pytest.fixture
def repos():
    """Patched AdmissionRepository and StudentAdmissionRepository instances."""
    admissions = MagicMock()
    admissions.find_by_codes = AsyncMock(return_value=[])
    admissions.get_by_ids = AsyncMock(return_value=[])
    links = MagicMock()
    links.get_linked_admission_ids = AsyncMock(return_value=set())
    links.bulk_link = AsyncMock(side_effect=lambda student_id, ids, created_by: len(list(ids)))
    with patch(f"{MODULE}.AdmissionRepository", return_value=admissions), \
            patch(f"{MODULE}.StudentAdmissionRepository", return_value=links):
        yield admissions, links


class TestCollectAdmissionCodes:

    def test_ordered_and_unique(self):
        l1 = [
            L1PredictResult(loai_uu_tien="A", ma_xet_tuyen={"X": 0.9, "Y": 0.8}),
            L1PredictResult(loai_uu_tien="B", ma_xet_tuyen={"Z": 0.7}),
        ]
        l2 = [L2PredictResult(ma_xet_tuyen="Y", score=0.5), L2PredictResult(ma_xet_tuyen="W", score=0.4)]
        assert collect_admission_codes(l1, l2) == ["X", "Y", "Z", "W"]


class TestLinkTierResults:

    async def test_links_only_matching_new_admissions(self, repos, mock_session, sample_profile):
        admissions, links = repos
        keep = make_admission("X", "A01")
        wrong_subject = make_admission("Y", "B00")
        wrong_province = make_admission("Z", "D01", province="Hà Nội")
        linked = make_admission("W", "D11")
        admissions.find_by_codes.return_value = [keep, wrong_subject, wrong_province, linked]
        links.get_linked_admission_ids.return_value = {linked.id}

        inserted = await AdmissionLinkingService().link_tier_results(
            mock_session,
            sample_profile,
            [L1PredictResult(loai_uu_tien="A", ma_xet_tuyen={"X": 0.9, "Y": 0.8, "Z": 0.7})],
            [L2PredictResult(ma_xet_tuyen="W", score=0.5)],
            "a@b.c",
        )

        assert inserted == 1
        admissions.find_by_codes.assert_awaited_once_with(["X", "Y", "Z", "W"])
        links.bulk_link.assert_awaited_once_with(sample_profile.student_id, [keep.id], "a@b.c")

    async def test_no_codes(self, repos, mock_session, sample_profile):
        admissions, links = repos
        assert await AdmissionLinkingService().link_tier_results(
            mock_session, sample_profile, [], [], "a@b.c"
        ) == 0
        admissions.find_by_codes.assert_not_awaited()

    async def test_codes_unknown_to_catalog(self, repos, mock_session, sample_profile):
        admissions, links = repos
        inserted = await AdmissionLinkingService().link_tier_results(
            mock_session, sample_profile, [], [L2PredictResult(ma_xet_tuyen="X", score=0.5)], "a@b.c"
        )
        assert inserted == 0
        links.bulk_link.assert_not_awaited()

    async def test_nothing_matches(self, repos, mock_session, sample_profile):
        admissions, links = repos
        admissions.find_by_codes.return_value = [make_admission("X", uni_type="Tư thục")]
        inserted = await AdmissionLinkingService().link_tier_results(
            mock_session, sample_profile, [], [L2PredictResult(ma_xet_tuyen="X", score=0.5)], "a@b.c"
        )
        assert inserted == 0
        links.bulk_link.assert_not_awaited()

    async def test_uses_injected_matcher(self, repos, mock_session, sample_profile):
        admissions, links = repos
        admission = make_admission("X", "B00")
        admissions.find_by_codes.return_value = [admission]
        matcher = MagicMock()
        matcher.filter.return_value = [admission]

        inserted = await AdmissionLinkingService(matcher).link_tier_results(
            mock_session, sample_profile, [], [L2PredictResult(ma_xet_tuyen="X", score=0.5)], "a@b.c"
        )

        assert inserted == 1
        matcher.filter.assert_called_once_with(sample_profile, [admission])


class TestLinkAdmissionIds:

    async def test_links_existing_unlinked_ids(self, repos, mock_session):
        admissions, links = repos
        student_id = uuid4()
        new, linked, missing = make_admission("A"), make_admission("B"), uuid4()
        admissions.get_by_ids.return_value = [new, linked]
        links.get_linked_admission_ids.return_value = {linked.id}

        inserted = await AdmissionLinkingService().link_admission_ids(
            mock_session, student_id, [new.id, linked.id, missing, new.id], "a@b.c"
        )

        assert inserted == 1
        admissions.get_by_ids.assert_awaited_once_with([new.id, linked.id, missing])
        links.bulk_link.assert_awaited_once_with(student_id, [new.id], "a@b.c")

    async def test_empty(self, repos, mock_session):
        admissions, links = repos
        assert await AdmissionLinkingService().link_admission_ids(mock_session, uuid4(), [], "a@b.c") == 0
        admissions.get_by_ids.assert_not_awaited()

    async def test_all_already_linked(self, repos, mock_session):
        admissions, links = repos
        admission = make_admission("A")
        admissions.get_by_ids.return_value = [admission]
        links.get_linked_admission_ids.return_value = {admission.id}
        assert await AdmissionLinkingService().link_admission_ids(
            mock_session, uuid4(), [admission.id], "a@b.c"
        ) == 0
        links.bulk_link.assert_not_awaited()
