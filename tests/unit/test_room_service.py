import threading

import pytest

from errors import ConflictError, InvalidRequestError, NotFoundError, UnauthorizedError, UpstreamFailure
from rooms.models import RoomStatus
from rooms.service import RoomService
from rooms.store import RoomStore
from scoring import DiscussionMode, final_score
from speech import mock_transcriber


def _started(service, names=("Alice", "Bob"), mode="debate"):
    room = service.create_room("AI ethics", mode)
    ids = [service.join(room.code, name)[1].id for name in names]
    service.start(room.code, room.host_secret)
    return room, ids


def test_create_room_defaults(room_service):
    room = room_service.create_room("  Remote work  ", "unknown-mode")
    assert room.topic == "Remote work"
    assert room.mode is DiscussionMode.DEBATE
    assert room.status is RoomStatus.WAITING
    assert room.time_limit == 30
    assert len(room.code) == 6 and room.code == room.code.upper()
    with pytest.raises(InvalidRequestError):
        room_service.create_room("   ")


def test_codes_are_case_insensitive(room_service):
    room = room_service.create_room("Topic")
    assert room_service.get_room(room.code.lower()).code == room.code
    with pytest.raises(NotFoundError):
        room_service.get_room("ZZZZZZ")


def test_host_only_operations(room_service):
    room = room_service.create_room("Topic")
    room_service.join(room.code, "Alice")
    with pytest.raises(UnauthorizedError):
        room_service.start(room.code, "wrong")
    with pytest.raises(UnauthorizedError):
        room_service.set_lock(room.code, "wrong", True)


def test_lock_blocks_joins_without_evicting(room_service):
    room = room_service.create_room("Topic")
    room_service.join(room.code, "Alice")
    room_service.set_lock(room.code, room.host_secret, True)
    with pytest.raises(ConflictError):
        room_service.join(room.code, "Bob")
    assert len(room_service.get_room(room.code).turn_order) == 1
    room_service.set_lock(room.code, room.host_secret, False)
    room_service.join(room.code, "Bob")


def test_submit_records_scored_response(room_service):
    room, (alice, bob) = _started(room_service)
    response = room_service.submit(room.code, alice, transcript="We should regulate frontier models.")
    assert response.round == 1
    assert response.final_score == final_score(response.scores, DiscussionMode.DEBATE)
    stored = room_service.get_room(room.code)
    assert len(stored.participants[alice].responses) == 1
    assert stored.turn_submitted is True


def test_submit_rejects_wrong_participant_and_second_attempt(room_service):
    room, (alice, bob) = _started(room_service)
    with pytest.raises(ConflictError):
        room_service.submit(room.code, bob, transcript="Out of turn")
    room_service.submit(room.code, alice, transcript="First")
    with pytest.raises(ConflictError):
        room_service.submit(room.code, alice, transcript="Second")


def test_reassigning_holder_does_not_reopen_turn(room_service):
    room, (alice, bob) = _started(room_service)
    room_service.submit(room.code, alice, transcript="First")
    reassigned = room_service.assign_turn(room.code, room.host_secret, alice)
    assert reassigned.turn_submitted is True
    with pytest.raises(ConflictError):
        room_service.submit(room.code, alice, transcript="Second")
    assert len(room_service.get_room(room.code).participants[alice].responses) == 1


def test_host_secret_with_non_ascii_characters_is_rejected(room_service):
    room = room_service.create_room("Topic")
    room_service.join(room.code, "Alice")
    with pytest.raises(UnauthorizedError):
        room_service.start(room.code, "sécret")
    assert room_service.get_room(room.code).status is RoomStatus.WAITING


def test_previous_holder_cannot_submit_after_next_turn(room_service):
    room, (alice, bob) = _started(room_service)
    room_service.next_turn(room.code, room.host_secret)
    with pytest.raises(ConflictError):
        room_service.submit(room.code, alice, transcript="Too late")


def test_submit_requires_payload(room_service):
    room, (alice, _) = _started(room_service)
    with pytest.raises(InvalidRequestError):
        room_service.submit(room.code, alice, transcript="   ")


def test_submit_with_audio_uses_transcriber(scores):
    calls = []

    def transcriber(audio, filename):
        calls.append((audio, filename))
        return "Transcribed words"

    service = RoomService(RoomStore(), evaluator=lambda *_: scores(), transcriber=transcriber)
    room, (alice, _) = _started(service)
    response = service.submit(room.code, alice, audio=b"\x00\x01", filename="clip.webm")
    assert response.transcript == "Transcribed words"
    assert calls == [(b"\x00\x01", "clip.webm")]


def test_audio_over_limit_rejected(scores):
    service = RoomService(RoomStore(), evaluator=lambda *_: scores(), transcriber=mock_transcriber, max_audio_bytes=4)
    room, (alice, _) = _started(service)
    with pytest.raises(InvalidRequestError):
        service.submit(room.code, alice, audio=b"12345")


def test_failed_transcription_leaves_room_unchanged(scores):
    def broken(audio, filename):
        raise UpstreamFailure("Transcription failed")

    service = RoomService(RoomStore(), evaluator=lambda *_: scores(), transcriber=broken)
    room, (alice, _) = _started(service)
    before = service.get_room(room.code)
    with pytest.raises(UpstreamFailure):
        service.submit(room.code, alice, audio=b"abc")
    after = service.get_room(room.code)
    assert after == before
    # The claim was released, so the participant can retry
    service.submit(room.code, alice, transcript="Typed instead")


def test_concurrent_submissions_accept_exactly_one(scores):
    gate = threading.Event()
    entered = threading.Event()

    def slow_evaluator(topic, transcript, mode):
        entered.set()
        gate.wait(timeout=5)
        return scores()

    service = RoomService(RoomStore(), evaluator=slow_evaluator, transcriber=mock_transcriber)
    room, (alice, _) = _started(service)
    outcomes = []

    def first():
        outcomes.append(service.submit(room.code, alice, transcript="first"))

    worker = threading.Thread(target=first)
    worker.start()
    assert entered.wait(timeout=5)
    with pytest.raises(ConflictError):
        service.submit(room.code, alice, transcript="second")
    gate.set()
    worker.join(timeout=5)
    assert len(outcomes) == 1
    assert len(service.get_room(room.code).participants[alice].responses) == 1


def test_turn_moving_during_evaluation_discards_submission(scores):
    holder = {}

    def evaluator(topic, transcript, mode):
        service = holder["service"]
        service.next_turn(holder["code"], holder["secret"])
        return scores()

    service = RoomService(RoomStore(), evaluator=evaluator, transcriber=mock_transcriber)
    room, (alice, _) = _started(service)
    holder.update(service=service, code=room.code, secret=room.host_secret)
    with pytest.raises(ConflictError):
        service.submit(room.code, alice, transcript="Slow argument")
    assert service.get_room(room.code).participants[alice].responses == []


def test_end_without_submissions(room_service):
    room, ids = _started(room_service, names=("Alice", "Bob", "Cy"))
    report = room_service.end(room.code, room.host_secret)
    assert report.analytics.balance_score == 0
    assert {r.participation_status for r in report.results} == {"silent"}
    assert [r.name for r in report.results] == ["Alice", "Bob", "Cy"]
    assert room_service.get_room(room.code).status is RoomStatus.RESULTS
    with pytest.raises(ConflictError):
        room_service.end(room.code, room.host_secret)


def test_results_only_after_end(room_service):
    room, _ = _started(room_service)
    with pytest.raises(ConflictError):
        room_service.results(room.code)
    room_service.end(room.code, room.host_secret)
    assert room_service.results(room.code).room_code == room.code


def test_end_from_waiting_is_allowed(room_service):
    room = room_service.create_room("Topic")
    report = room_service.end(room.code, room.host_secret)
    assert report.results == []
    assert report.overall_summary == "No participants"


def test_classroom_scenario(scores):
    script = {"Alice argues": scores(8, 9, 9, 2), "Bob argues": scores(6, 5, 6, 5)}
    service = RoomService(
        RoomStore(),
        evaluator=lambda topic, transcript, mode: script[transcript],
        transcriber=mock_transcriber,
    )
    room = service.create_room("AI ethics", "classroom")
    alice = service.join(room.code, "Alice")[1].id
    bob = service.join(room.code, "Bob")[1].id

    state = service.start(room.code, room.host_secret)
    assert (state.current_turn, state.current_round) == (alice, 1)

    service.submit(room.code, alice, transcript="Alice argues")
    with pytest.raises(ConflictError):
        service.submit(room.code, alice, transcript="Alice argues")

    state = service.next_turn(room.code, room.host_secret)
    assert (state.current_turn, state.current_round) == (bob, 1)
    service.submit(room.code, bob, transcript="Bob argues")

    state = service.next_turn(room.code, room.host_secret)
    assert (state.current_turn, state.current_round) == (alice, 2)

    report = service.end(room.code, room.host_secret)
    assert [r.name for r in report.results] == ["Alice", "Bob"]
    assert [r.rank for r in report.results] == [1, 2]
    assert report.results[0].average_score == final_score(scores(8, 9, 9, 2), DiscussionMode.CLASSROOM)
    assert report.overall_summary == "Winner: Alice"
    assert report.mode_label == "Classroom Discussion"
    assert report.total_rounds == 2
    assert [entry.participant_name for entry in report.transcript] == ["Alice", "Bob"]
