"""Tests for direct matching."""

from unittest.mock import AsyncMock

import pytest

from talent_match.core.errors import (
    ConflictError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from talent_match.core.ids import new_id
from talent_match.core.models import Match, MatchStatus


class TestCreateMatch:
    """Test admin-initiated matches."""

    @pytest.mark.asyncio
    async def test_create_match(self, match_service, job, talent, admin):
        view = await match_service.create_match(talent.id, job.id, admin.id)

        assert view.match.status is MatchStatus.MATCHED
        assert view.match.matched_by == admin.id
        assert view.job["id"] == job.id
        assert view.job["description"] == job.description
        assert view.user["id"] == talent.id
        assert view.matcher["id"] == admin.id

    @pytest.mark.asyncio
    async def test_second_match_conflicts(self, match_service, stores, job, talent, admin):
        """Matching the same pair twice returns AlreadyMatched."""
        await match_service.create_match(talent.id, job.id, admin.id)
        second = await match_service.create_match(talent.id, job.id, admin.id)

        assert isinstance(second, ConflictError)
        assert second.reason == "AlreadyMatched"
        assert second.message == "User is already matched to this job"
        assert len(await stores.matches.list_all()) == 1

    @pytest.mark.asyncio
    async def test_custom_status(self, match_service, job, talent, admin):
        view = await match_service.create_match(talent.id, job.id, admin.id, status="viewed")

        assert view.match.status is MatchStatus.VIEWED

    @pytest.mark.asyncio
    async def test_invalid_status(self, match_service, job, talent, admin):
        result = await match_service.create_match(talent.id, job.id, admin.id, status="hired")

        assert isinstance(result, ValidationError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["user_id", "job_id", "matched_by"])
    async def test_malformed_ids(self, match_service, job, talent, admin, field):
        args = {"user_id": talent.id, "job_id": job.id, "matched_by": admin.id}
        args[field] = "bogus"

        result = await match_service.create_match(**args)

        assert isinstance(result, ValidationError)

    @pytest.mark.asyncio
    async def test_unknown_user(self, match_service, job, admin):
        result = await match_service.create_match(new_id(), job.id, admin.id)

        assert isinstance(result, NotFoundError)
        assert result.entity == "User"

    @pytest.mark.asyncio
    async def test_admin_not_matchable(self, match_service, job, admin):
        """Only talents can be matched."""
        result = await match_service.create_match(admin.id, job.id, admin.id)

        assert isinstance(result, ValidationError)
        assert result.reason == "OnlyTalentsMatchable"
        assert result.message == "Only talent users can be matched to jobs"

    @pytest.mark.asyncio
    async def test_user_checked_before_job(self, match_service, admin):
        """With both user and job invalid, the user check fails first."""
        result = await match_service.create_match(admin.id, new_id(), admin.id)

        assert isinstance(result, ValidationError)
        assert result.reason == "OnlyTalentsMatchable"

    @pytest.mark.asyncio
    async def test_unknown_job(self, match_service, talent, admin):
        result = await match_service.create_match(talent.id, new_id(), admin.id)

        assert isinstance(result, NotFoundError)
        assert result.entity == "Job"

    @pytest.mark.asyncio
    async def test_inactive_job(self, match_service, inactive_job, talent, admin):
        result = await match_service.create_match(talent.id, inactive_job.id, admin.id)

        assert isinstance(result, InvalidStateError)
        assert result.message == "Cannot match to inactive job"

    @pytest.mark.asyncio
    async def test_store_duplicate_maps_to_conflict(self, match_service, stores, job, talent, admin):
        await stores.matches.create(Match(job_id=job.id, user_id=talent.id, matched_by=admin.id))
        stores.matches.find_by_user_and_job = AsyncMock(return_value=None)

        result = await match_service.create_match(talent.id, job.id, admin.id)

        assert isinstance(result, ConflictError)

    @pytest.mark.asyncio
    async def test_store_failure(self, match_service, stores, job, talent, admin):
        stores.matches.create = AsyncMock(side_effect=RuntimeError("boom"))

        result = await match_service.create_match(talent.id, job.id, admin.id)

        assert isinstance(result, InternalError)

    @pytest.mark.asyncio
    async def test_self_match(self, match_service, job, talent):
        """A talent may record an applied match for themselves."""
        view = await match_service.create_match(talent.id, job.id, talent.id, status=MatchStatus.APPLIED)

        assert view.match.status is MatchStatus.APPLIED
        assert view.matcher["id"] == talent.id


class TestListMatches:
    """Test match listings."""

    @pytest.mark.asyncio
    async def test_listings(self, match_service, job, talent, admin):
        created = await match_service.create_match(talent.id, job.id, admin.id)

        everything = await match_service.list_matches()
        for_user = await match_service.matches_for_user(talent.id)
        for_job = await match_service.matches_for_job(job.id)

        assert [m.id for m in everything] == [created.id]
        assert [m.id for m in for_user] == [created.id]
        assert for_user[0].user is None
        assert for_user[0].job["id"] == job.id
        assert [m.id for m in for_job] == [created.id]
        assert for_job[0].job is None

    @pytest.mark.asyncio
    async def test_unknown_user_or_job(self, match_service):
        assert isinstance(await match_service.matches_for_user(new_id()), NotFoundError)
        assert isinstance(await match_service.matches_for_job(new_id()), NotFoundError)
        assert isinstance(await match_service.matches_for_user("bad"), NotFoundError)
