"""
Test configuration and fixtures for the UniGuide prediction backend.

Provides shared fixtures for unit tests. No live database, Redis or
prediction service is used: sessions are AsyncMocks and HTTP goes through
httpx.MockTransport.
"""

import pytest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

from uniguide.domain.student_profile import StudentProfile

from tests.factories import build_profile


# =============================================================================
# Session Fixtures
# =============================================================================

@pytest.fixture
def mock_session():
    """Mock async session for testing."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def session_scope(mock_session):
    """Drop-in replacement for get_session_context yielding mock_session."""

    @asynccontextmanager
    async def scope():
        yield mock_session

    return scope


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_profile() -> StudentProfile:
    """Public-preferring student in Hồ Chí Minh with one major group."""
    return build_profile()


@pytest.fixture
def profile_without_national_exam() -> StudentProfile:
    """Student who has not taken the national exam yet."""
    return build_profile(national_exams=[])
