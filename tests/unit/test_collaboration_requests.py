import itertools
import threading
from datetime import UTC, datetime

import pytest

from nexus.application.use_cases.collaboration_requests import (
    RespondToCollaborationRequestUseCase,
    SendCollaborationRequestUseCase,
)
from nexus.domain.entities.collaboration_request import (
    CollaborationRequestEntity,
    RequestStatus,
)
from nexus.domain.errors import (
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from nexus.infrastructure.database.repositories.collaboration_request_repository import (
    CollaborationRequestRepository,
)


def _request(status=RequestStatus.PENDING):
    return CollaborationRequestEntity(
        id=1, sender_id=1, receiver_id=2, status=status, created_at=datetime.now(UTC)
    )


class TestStatusTransitions:
    @pytest.mark.parametrize("target", [RequestStatus.ACCEPTED, RequestStatus.REJECTED])
    def test_pending_can_be_answered(self, target):
        assert _request().transition_to(target).status is target

    @pytest.mark.parametrize("terminal", [RequestStatus.ACCEPTED, RequestStatus.REJECTED])
    @pytest.mark.parametrize("target", [RequestStatus.ACCEPTED, RequestStatus.REJECTED])
    def test_answered_requests_are_final(self, terminal, target):
        with pytest.raises(InvalidStatusTransitionError):
            _request(terminal).transition_to(target)

    def test_cannot_move_back_to_pending(self):
        with pytest.raises(InvalidStatusTransitionError):
            _request().transition_to(RequestStatus.PENDING)


class TestSendRequest:
    def test_creates_pending_request(self, users):
        repo = CollaborationRequestRepository(None)
        req = SendCollaborationRequestUseCase(repo, users).execute(1, 2, "Let's talk")
        assert req.status is RequestStatus.PENDING
        assert (req.sender_id, req.receiver_id, req.message) == (1, 2, "Let's talk")

    def test_rejects_request_to_self(self, users):
        repo = CollaborationRequestRepository(None)
        with pytest.raises(ValueError, match="yourself"):
            SendCollaborationRequestUseCase(repo, users).execute(1, 1)
        assert repo.list_for_user(1) == []

    def test_rejects_unknown_receiver(self, users):
        repo = CollaborationRequestRepository(None)
        with pytest.raises(NotFoundError):
            SendCollaborationRequestUseCase(repo, users).execute(1, 99)

    def test_rejects_duplicate_pending_request(self, users):
        repo = CollaborationRequestRepository(None)
        uc = SendCollaborationRequestUseCase(repo, users)
        uc.execute(1, 2)
        with pytest.raises(ConflictError):
            uc.execute(1, 2)
        # the other direction is a different request
        assert uc.execute(2, 1).sender_id == 2

    def test_allows_new_request_after_answer(self, users):
        repo = CollaborationRequestRepository(None)
        uc = SendCollaborationRequestUseCase(repo, users)
        first = uc.execute(1, 2)
        repo.update_status(first.id, RequestStatus.REJECTED)
        assert uc.execute(1, 2).id != first.id


class TestRespondToRequest:
    def test_receiver_accepts(self, users):
        repo = CollaborationRequestRepository(None)
        req = SendCollaborationRequestUseCase(repo, users).execute(1, 2)
        updated = RespondToCollaborationRequestUseCase(repo).execute(2, req.id, RequestStatus.ACCEPTED)
        assert updated.status is RequestStatus.ACCEPTED
        assert repo.get(req.id).status is RequestStatus.ACCEPTED

    def test_sender_cannot_answer(self, users):
        repo = CollaborationRequestRepository(None)
        req = SendCollaborationRequestUseCase(repo, users).execute(1, 2)
        with pytest.raises(PermissionDeniedError):
            RespondToCollaborationRequestUseCase(repo).execute(1, req.id, RequestStatus.ACCEPTED)

    def test_unknown_request(self):
        with pytest.raises(NotFoundError):
            RespondToCollaborationRequestUseCase(CollaborationRequestRepository(None)).execute(
                2, 123, RequestStatus.REJECTED
            )

    def test_answered_request_cannot_change(self, users):
        repo = CollaborationRequestRepository(None)
        req = SendCollaborationRequestUseCase(repo, users).execute(1, 2)
        uc = RespondToCollaborationRequestUseCase(repo)
        uc.execute(2, req.id, RequestStatus.REJECTED)
        with pytest.raises(InvalidStatusTransitionError):
            uc.execute(2, req.id, RequestStatus.ACCEPTED)
        assert repo.get(req.id).status is RequestStatus.REJECTED


class TestConcurrentWrites:
    def test_only_one_of_two_simultaneous_answers_wins(self, users):
        repo = CollaborationRequestRepository(None)
        req = SendCollaborationRequestUseCase(repo, users).execute(1, 2)
        uc = RespondToCollaborationRequestUseCase(repo)

        # both callers read the request while it is still pending
        barrier = threading.Barrier(2)
        reads = itertools.count()
        original_get = repo.get

        def get_in_lockstep(request_id):
            found = original_get(request_id)
            if next(reads) < 2:
                barrier.wait(timeout=5)
            return found

        repo.get = get_in_lockstep
        results = {}

        def answer(status):
            try:
                results[status] = uc.execute(2, req.id, status).status
            except InvalidStatusTransitionError:
                results[status] = "conflict"

        threads = [
            threading.Thread(target=answer, args=(status,))
            for status in (RequestStatus.ACCEPTED, RequestStatus.REJECTED)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert list(results.values()).count("conflict") == 1
        winner = next(status for status, outcome in results.items() if outcome != "conflict")
        assert repo.get(req.id).status is winner

    def test_simultaneous_sends_open_one_pending_request(self, users):
        repo = CollaborationRequestRepository(None)
        uc = SendCollaborationRequestUseCase(repo, users)
        barrier = threading.Barrier(4)
        created, conflicts = [], []

        def send():
            barrier.wait(timeout=5)
            try:
                created.append(uc.execute(1, 2))
            except ConflictError:
                conflicts.append(True)

        threads = [threading.Thread(target=send) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert len(created) == 1
        assert len(conflicts) == 3
        assert [r.id for r in repo.list_for_user(1)] == [created[0].id]

    def test_update_status_skips_answered_request(self, users):
        repo = CollaborationRequestRepository(None)
        req = repo.create(1, 2)
        assert repo.update_status(req.id, RequestStatus.ACCEPTED).status is RequestStatus.ACCEPTED
        assert repo.update_status(req.id, RequestStatus.REJECTED) is None
        assert repo.get(req.id).status is RequestStatus.ACCEPTED
