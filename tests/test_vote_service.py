from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from picvote.errors import (
    AdminRequiredError,
    CandidateNotFoundError,
    DuplicateVoterError,
    StoreUnavailableError,
    ValidationError,
    VotingClosedError,
)
from picvote.storage import JsonStore, new_id
from picvote.vote_service import VoteService

NOW = datetime(2026, 4, 10, 8, 0, tzinfo=timezone.utc)


def test_vote_increments_ledger_and_tally(service, store, candidate):
    record = service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    assert record.voter_id == "1301190001"
    assert store.count_voter_records() == 1
    assert store.get_candidate(candidate.id).vote_count == 1


def test_each_distinct_voter_adds_exactly_one(service, store, candidate):
    other = service.add_candidate("Mountain", "", "", is_admin=True)

    for i in range(5):
        target = candidate if i % 2 == 0 else other
        before_ledger = store.count_voter_records()
        before_votes = store.get_candidate(target.id).vote_count

        service.submit_vote(target.id, f"Student {i}", f"nim-{i}", NOW)

        assert store.count_voter_records() == before_ledger + 1
        assert store.get_candidate(target.id).vote_count == before_votes + 1

    assert store.get_candidate(candidate.id).vote_count == 3
    assert store.get_candidate(other.id).vote_count == 2


def test_second_vote_with_same_id_is_rejected(service, store, candidate):
    service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    with pytest.raises(DuplicateVoterError):
        service.submit_vote(candidate.id, "Budi again", "1301190001", NOW)

    assert store.count_voter_records() == 1
    assert store.get_candidate(candidate.id).vote_count == 1


def test_voter_id_is_trimmed_before_dedup(service, store, candidate):
    service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    with pytest.raises(DuplicateVoterError):
        service.submit_vote(candidate.id, "Budi", "  1301190001 ", NOW)
    assert service.has_voted(" 1301190001")


def test_closed_voting_rejects_before_anything_else(service, store, candidate):
    service.set_deadline(NOW, is_admin=True)

    with pytest.raises(VotingClosedError):
        service.submit_vote(candidate.id, "Budi", "1301190001", NOW)
    # closed wins over invalid input
    with pytest.raises(VotingClosedError):
        service.submit_vote("not-an-id", "", "", NOW + timedelta(hours=1))

    assert store.count_voter_records() == 0


def test_vote_just_before_deadline_counts(service, store, candidate):
    service.set_deadline(NOW, is_admin=True)
    service.submit_vote(candidate.id, "Budi", "1301190001", NOW - timedelta(seconds=1))
    assert store.get_candidate(candidate.id).vote_count == 1


@pytest.mark.parametrize("name,nim", [("", "1301190001"), ("   ", "1301190001"), ("Budi", ""), ("Budi", "\t"), (None, "x")])
def test_blank_name_or_id_is_invalid(service, store, candidate, name, nim):
    with pytest.raises(ValidationError):
        service.submit_vote(candidate.id, name, nim, NOW)
    assert store.count_voter_records() == 0


@pytest.mark.parametrize("candidate_id", ["", "123", "zzzzzzzzzzzzzzzzzzzzzzzz", None])
def test_malformed_candidate_id_is_invalid(service, candidate_id):
    with pytest.raises(ValidationError):
        service.submit_vote(candidate_id, "Budi", "1301190001", NOW)


def test_unknown_candidate(service, store):
    missing = new_id()
    with pytest.raises(CandidateNotFoundError) as exc_info:
        service.submit_vote(missing, "Budi", "1301190001", NOW)
    assert exc_info.value.candidate_id == missing
    assert store.count_voter_records() == 0


class DeletesCandidateMidVote(JsonStore):
    """Deletes the candidate right after the ledger write, before the +1."""

    def insert_voter_record(self, candidate_id, voter_name, voter_id, timestamp):
        record = super().insert_voter_record(candidate_id, voter_name, voter_id, timestamp)
        self.delete_candidate(candidate_id)
        return record


def test_candidate_deleted_mid_flight_rolls_back():
    store = DeletesCandidateMidVote()
    service = VoteService(store)
    candidate = service.add_candidate("Sunset", "", "", is_admin=True)

    with pytest.raises(CandidateNotFoundError):
        service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    assert store.count_voter_records() == 0
    assert not service.has_voted("1301190001")


class BrokenCounter(JsonStore):
    def increment_vote_count(self, candidate_id):
        raise StoreUnavailableError()


def test_store_failure_on_tally_rolls_back_ledger():
    store = BrokenCounter()
    service = VoteService(store)
    candidate = service.add_candidate("Sunset", "", "", is_admin=True)

    with pytest.raises(StoreUnavailableError):
        service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    assert store.count_voter_records() == 0
    assert store.get_candidate(candidate.id).vote_count == 0
    # the voter can retry the whole request later
    assert not service.has_voted("1301190001")


def test_hundred_concurrent_voters_no_lost_updates(service, store, candidate):
    def vote(i):
        return service.submit_vote(candidate.id, f"Student {i}", f"nim-{i:03d}", NOW)

    with ThreadPoolExecutor(max_workers=16) as pool:
        records = list(pool.map(vote, range(100)))

    assert len(records) == 100
    assert store.get_candidate(candidate.id).vote_count == 100
    assert store.count_voter_records() == 100


def test_concurrent_duplicates_only_one_succeeds(service, store, candidate):
    def vote(_):
        try:
            service.submit_vote(candidate.id, "Budi", "1301190001", NOW)
            return "ok"
        except DuplicateVoterError:
            return "duplicate"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(vote, range(20)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("duplicate") == 19
    assert store.get_candidate(candidate.id).vote_count == 1


def test_tally_matches_ledger(service, store, candidate):
    other = service.add_candidate("Forest", "", "", is_admin=True)
    for i in range(7):
        service.submit_vote((candidate, other)[i % 2].id, "S", f"nim-{i}", NOW)
    with pytest.raises(DuplicateVoterError):
        service.submit_vote(other.id, "S", "nim-0", NOW)

    assert sum(c.vote_count for c in store.list_candidates()) == store.count_voter_records() == 7


def test_results_summary(service, candidate):
    other = service.add_candidate("Forest", "", "", is_admin=True)
    service.submit_vote(other.id, "A", "1", NOW)
    service.submit_vote(other.id, "B", "2", NOW)
    service.submit_vote(candidate.id, "C", "3", NOW)

    summary = service.list_candidates_with_results(NOW)

    assert summary.total_votes == 3
    assert summary.is_voting_open
    assert summary.deadline is None
    assert [(r.candidate.title, r.percentage) for r in summary.results] == [("Forest", 66.67), ("Sunset", 33.33)]


def test_admin_operations_need_admin_flag(service, candidate):
    with pytest.raises(AdminRequiredError):
        service.add_candidate("X", "", "", is_admin=False)
    with pytest.raises(AdminRequiredError):
        service.delete_candidate(candidate.id, is_admin=False)
    with pytest.raises(AdminRequiredError):
        service.set_deadline(NOW, is_admin=False)
    with pytest.raises(AdminRequiredError):
        service.list_voter_records(is_admin=False)
    with pytest.raises(AdminRequiredError):
        service.list_candidates(is_admin=False)


def test_add_candidate_requires_title(service):
    with pytest.raises(ValidationError):
        service.add_candidate("  ", "desc", "", is_admin=True)


def test_new_candidate_starts_at_zero(service):
    created = service.add_candidate(" Lake ", " calm ", "/uploads/lake.png", is_admin=True)
    assert created.vote_count == 0
    assert created.title == "Lake"
    assert created.description == "calm"


def test_delete_candidate_keeps_ledger(service, store, candidate):
    service.submit_vote(candidate.id, "Budi", "1301190001", NOW)

    service.delete_candidate(candidate.id, is_admin=True)

    assert store.get_candidate(candidate.id) is None
    records = service.list_voter_records(is_admin=True)
    assert [r.candidate_id for r in records] == [candidate.id]


def test_delete_missing_or_malformed_candidate(service):
    with pytest.raises(CandidateNotFoundError):
        service.delete_candidate(new_id(), is_admin=True)
    with pytest.raises(ValidationError):
        service.delete_candidate("nope", is_admin=True)


def test_admin_candidate_list_is_newest_first(service):
    first = service.add_candidate("First", "", "", is_admin=True)
    second = service.add_candidate("Second", "", "", is_admin=True)

    assert [c.id for c in service.list_candidates(is_admin=True)] == [second.id, first.id]
    assert [c.id for c in service.list_public_candidates()] == [first.id, second.id]
