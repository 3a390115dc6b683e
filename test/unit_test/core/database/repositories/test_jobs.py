"""Unit tests for the marketplace repositories.

Covers public visibility of job offers and work requests, listing filters
and ordering, per-offer aggregates and removal with dependent rows.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.jobs import JobApplication, JobOffer
from buildboss.core.database.entities.messages import Message
from buildboss.core.database.entities.users import User
from buildboss.core.database.entities.work_requests import WorkRequest
from buildboss.core.database.repositories.jobs import (
    JobApplicationRepository,
    JobOfferRepository,
    WorkRequestRepository,
)


def _offer(company, user, title, **overrides) -> JobOffer:
    values = dict(
        title=title,
        description=f"{title} na budowę",
        category="CONSTRUCTION",
        voivodeship="MAZOWIECKIE",
        city="Warszawa",
        company_id=company.id,
        created_by_id=user.id,
    )
    values.update(overrides)
    return JobOffer(**values)


@pytest.fixture
async def offers(in_memory_session, sample_user, sample_company):
    rows = {
        "mason": _offer(sample_company, sample_user, "Murarz", salary_min=5000, salary_max=7000),
        "welder": _offer(sample_company, sample_user, "Spawacz", city="Kraków", voivodeship="MALOPOLSKIE", salary_min=8000),
        "inactive": _offer(sample_company, sample_user, "Tynkarz", is_active=False),
        "private": _offer(sample_company, sample_user, "Dekarz", is_public=False),
        "expired": _offer(sample_company, sample_user, "Glazurnik", expires_at=utc_now() - timedelta(days=1)),
        "future": _offer(sample_company, sample_user, "Elektryk", expires_at=utc_now() + timedelta(days=30)),
    }
    in_memory_session.add_all(rows.values())
    await in_memory_session.commit()
    return rows


class TestJobOfferVisibility:
    async def test_public_listing(self, in_memory_session, offers):
        repository = JobOfferRepository(in_memory_session)
        titles = {offer.title for offer in await repository.list()}
        assert titles == {"Murarz", "Spawacz", "Elektryk"}
        assert await repository.count_public() == 3

    async def test_get_visible(self, in_memory_session, offers):
        repository = JobOfferRepository(in_memory_session)
        assert (await repository.get_visible(offers["mason"].id)).title == "Murarz"
        for hidden in ("inactive", "private", "expired"):
            assert await repository.get_visible(offers[hidden].id) is None


class TestJobOfferFilters:
    @pytest.mark.parametrize(
        "filters,expected",
        [
            ({"city": "krak"}, {"Spawacz"}),
            ({"voivodeship": "MAZOWIECKIE"}, {"Murarz", "Elektryk"}),
            ({"salary_min": 6000}, {"Spawacz"}),
            ({"salary_max": 7000}, {"Murarz"}),
            ({"search": "spaw"}, {"Spawacz"}),
            ({"category": "PLUMBING"}, set()),
        ],
    )
    async def test_filters(self, in_memory_session, offers, filters, expected):
        repository = JobOfferRepository(in_memory_session)
        assert {offer.title for offer in await repository.list(filters=filters)} == expected
        assert await repository.count_public(filters) == len(expected)

    async def test_sort_by_title(self, in_memory_session, offers):
        repository = JobOfferRepository(in_memory_session)
        listed = await repository.list(filters={"sort_by": "title", "sort_order": "asc"})
        assert [offer.title for offer in listed] == ["Elektryk", "Murarz", "Spawacz"]

    async def test_unknown_sort_field_falls_back(self, in_memory_session, offers):
        repository = JobOfferRepository(in_memory_session)
        listed = await repository.list(filters={"sort_by": "description"})
        assert len(listed) == 3

    async def test_pagination(self, in_memory_session, offers):
        repository = JobOfferRepository(in_memory_session)
        page = await repository.list(limit=2, offset=2, filters={"sort_by": "title", "sort_order": "asc"})
        assert [offer.title for offer in page] == ["Spawacz"]


class TestJobOfferOwnership:
    async def test_created_by_includes_hidden(self, in_memory_session, sample_user, offers):
        repository = JobOfferRepository(in_memory_session)
        assert len(await repository.list_created_by(sample_user.id)) == 6
        assert await repository.count_active_created_by(sample_user.id) == 5

    async def test_delete_with_related(self, in_memory_session, sample_user, offers):
        applicant = User(email="worker@example.com")
        in_memory_session.add(applicant)
        await in_memory_session.commit()
        offer = offers["mason"]
        in_memory_session.add_all(
            [
                JobApplication(job_offer_id=offer.id, applicant_id=applicant.id),
                Message(content="Hi", sender_id=applicant.id, receiver_id=sample_user.id, job_offer_id=offer.id),
            ]
        )
        await in_memory_session.commit()

        await JobOfferRepository(in_memory_session).delete_with_related(offer)

        assert await JobOfferRepository(in_memory_session).count() == 5
        assert await JobApplicationRepository(in_memory_session).count() == 0


class TestJobApplications:
    async def test_lookups_and_counts(self, in_memory_session, offers):
        applicant = User(email="worker@example.com")
        in_memory_session.add(applicant)
        await in_memory_session.commit()
        repository = JobApplicationRepository(in_memory_session)
        await repository.create(JobApplication(job_offer_id=offers["mason"].id, applicant_id=applicant.id))

        assert await repository.get_for(offers["mason"].id, applicant.id) is not None
        assert await repository.get_for(offers["welder"].id, applicant.id) is None
        applied = await repository.offers_applied_by(applicant.id, [offers["mason"].id, offers["welder"].id])
        assert applied == {offers["mason"].id}
        counts = await repository.counts_for_offers([offers["mason"].id, offers["welder"].id])
        assert counts == {offers["mason"].id: 1}

    async def test_empty_inputs(self, in_memory_session):
        repository = JobApplicationRepository(in_memory_session)
        assert await repository.offers_applied_by("u", []) == set()
        assert await repository.counts_for_offers([]) == {}


class TestWorkRequests:
    @pytest.fixture
    async def requests(self, in_memory_session, sample_user, sample_company):
        common = dict(category="RENOVATION", voivodeship="MAZOWIECKIE", created_by_id=sample_user.id)
        rows = [
            WorkRequest(title="Remont łazienki", description="x", city="Warszawa", budget_min=3000,
                        company_id=sample_company.id, **common),
            WorkRequest(title="Ocieplenie domu", description="x", city="Radom", budget_max=20000, **common),
            WorkRequest(title="Stare", description="x", city="Radom", is_active=False, **common),
        ]
        in_memory_session.add_all(rows)
        await in_memory_session.commit()
        return rows

    async def test_public_filters(self, in_memory_session, requests):
        repository = WorkRequestRepository(in_memory_session)
        assert await repository.count_public() == 2
        assert [r.title for r in await repository.list(filters={"city": "radom"})] == ["Ocieplenie domu"]
        assert [r.title for r in await repository.list(filters={"budget_min": 1000})] == ["Remont łazienki"]

    async def test_created_by_status(self, in_memory_session, sample_user, sample_company, requests):
        repository = WorkRequestRepository(in_memory_session)
        assert len(await repository.list_created_by(sample_user.id)) == 3
        assert len(await repository.list_created_by(sample_user.id, status="inactive")) == 1
        assert len(await repository.list_created_by(sample_user.id, company_id=sample_company.id)) == 1
        assert await repository.count_active_created_by(sample_user.id) == 2

    async def test_message_counts_and_delete(self, in_memory_session, sample_user, requests):
        other = User(email="client@example.com")
        in_memory_session.add(other)
        await in_memory_session.commit()
        target = requests[0]
        in_memory_session.add_all(
            [
                Message(content="a", sender_id=other.id, receiver_id=sample_user.id, work_request_id=target.id),
                Message(content="b", sender_id=sample_user.id, receiver_id=other.id, work_request_id=target.id),
            ]
        )
        await in_memory_session.commit()
        repository = WorkRequestRepository(in_memory_session)

        assert await repository.message_counts([target.id]) == {target.id: 2}
        await repository.delete_with_related(target)
        assert await repository.count() == 2
        assert await repository.message_counts([target.id]) == {}
