"""Tests for the practice session turn protocol."""

import threading
from contextlib import contextmanager

import pytest

from conftest import FakeModelClient, turn_json
from examenbuddy.errors import AnswerSubmitError, ModelCallError, SessionBusyError, SessionStartError, SessionStateError
from examenbuddy.models import Role, SessionMode, SessionStatus
from examenbuddy.state import InFlightGuard


def _active_session(make_controller, economie, profile, replies, limit=3, text_replies=None):
    client = FakeModelClient(json_replies=replies, text_replies=text_replies)
    controller = make_controller(client)
    session = controller.open_session(economie, profile, SessionMode.PRACTICE, limit)
    controller.start_session(session, "Markt")
    return controller, session, client


def test_open_session_starts_in_setup(make_controller, economie, profile):
    controller = make_controller(FakeModelClient())
    session = controller.open_session(economie, profile, question_limit=5)

    assert session.status == SessionStatus.SETUP
    assert len(session.log) == 0
    assert controller.store.has_session(session.session_id)


def test_open_session_rejects_out_of_range_limit(make_controller, economie, profile):
    controller = make_controller(FakeModelClient())

    with pytest.raises(SessionStateError):
        controller.open_session(economie, profile, question_limit=500)


def test_start_session_returns_first_question_without_feedback(make_controller, economie, profile):
    controller, session, client = _active_session(make_controller, economie, profile, [turn_json()])

    assert session.status == SessionStatus.ACTIVE
    assert session.current_turn.feedback is None
    assert session.current_question.text == "Wat is prijselasticiteit?"
    assert session.current_question.difficulty == "medium"
    assert [t.role for t in session.log] == [Role.USER, Role.MODEL]
    assert "Markt" in session.log.turns[0].content
    assert session.score.total == 0


def test_start_session_drops_feedback_on_first_turn(make_controller, economie, profile):
    client = FakeModelClient(json_replies=[turn_json(score=9)])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)

    turn = controller.start_session(session, "")

    assert turn.feedback is None
    assert session.score.total == 0


def test_start_session_with_empty_topics_lets_model_choose(make_controller, economie, profile):
    client = FakeModelClient(json_replies=[turn_json()])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)

    controller.start_session(session, "")

    prompt = client.json_calls[0]["contents"][0]["parts"][0]
    assert "Kies zelf een belangrijk onderwerp" in prompt
    assert session.status == SessionStatus.ACTIVE


def test_failed_start_stays_in_setup_and_can_retry(make_controller, economie, profile):
    client = FakeModelClient(json_replies=["dit is geen json", turn_json()])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)

    with pytest.raises(SessionStartError):
        controller.start_session(session, "Markt")
    assert session.status == SessionStatus.SETUP
    assert len(session.log) == 0

    controller.start_session(session, "Markt")
    assert session.status == SessionStatus.ACTIVE


def test_start_twice_is_rejected(make_controller, economie, profile):
    controller, session, _ = _active_session(make_controller, economie, profile, [turn_json()])

    with pytest.raises(SessionStateError):
        controller.start_session(session, "Markt")


def test_submit_answer_appends_pair_and_scores(make_controller, economie, profile):
    controller, session, client = _active_session(make_controller, economie, profile, [turn_json(), turn_json("Vraag 2", score=7)])

    turn = controller.submit_answer(session, "De vraag daalt sterk.")

    assert turn.feedback.score == 7
    assert session.score.correct == 1
    assert session.score.total == 1
    assert session.showing_feedback is True
    assert len(session.log) == 4
    assert [t.role for t in session.log] == [Role.USER, Role.MODEL, Role.USER, Role.MODEL]
    sent = client.json_calls[1]["contents"]
    assert len(sent) == 3
    assert "De vraag daalt sterk." in sent[-1]["parts"][0]


@pytest.mark.parametrize("score, counted", [(6, 1), (5, 0), (10, 1), (0, 0)])
def test_passing_threshold_boundary(make_controller, economie, profile, score, counted):
    controller, session, _ = _active_session(make_controller, economie, profile, [turn_json(), turn_json(score=score)])

    controller.submit_answer(session, "antwoord")

    assert session.score.correct == counted
    assert session.score.total == 1


def test_passing_threshold_is_configurable(make_controller, economie, profile):
    client = FakeModelClient(json_replies=[turn_json(), turn_json(score=6)])
    controller = make_controller(client, passing_score=7)
    session = controller.open_session(economie, profile)
    controller.start_session(session, "")

    controller.submit_answer(session, "antwoord")

    assert session.score.correct == 0


def test_failed_submit_leaves_log_untouched(make_controller, economie, profile):
    controller, session, _ = _active_session(
        make_controller, economie, profile, [turn_json(), ModelCallError("boom"), turn_json(score=8)]
    )
    before = len(session.log)

    with pytest.raises(AnswerSubmitError):
        controller.submit_answer(session, "antwoord")

    assert len(session.log) == before
    assert session.score.total == 0
    controller.submit_answer(session, "antwoord")
    assert session.score.total == 1


def test_submit_without_feedback_in_reply_is_a_failure(make_controller, economie, profile):
    controller, session, _ = _active_session(make_controller, economie, profile, [turn_json(), turn_json()])

    with pytest.raises(AnswerSubmitError):
        controller.submit_answer(session, "antwoord")
    assert len(session.log) == 2


def test_empty_answer_is_rejected_without_model_call(make_controller, economie, profile):
    controller, session, client = _active_session(make_controller, economie, profile, [turn_json()])

    with pytest.raises(SessionStateError):
        controller.submit_answer(session, "   ")
    assert len(client.json_calls) == 1


def test_submit_before_advance_is_rejected(make_controller, economie, profile):
    controller, session, _ = _active_session(make_controller, economie, profile, [turn_json(), turn_json(score=7)])
    controller.submit_answer(session, "antwoord")

    with pytest.raises(SessionStateError):
        controller.submit_answer(session, "nog een antwoord")


def test_advance_exposes_next_question_without_model_call(make_controller, economie, profile):
    controller, session, client = _active_session(make_controller, economie, profile, [turn_json(), turn_json("Vraag 2", score=7)])
    controller.submit_answer(session, "antwoord")
    calls = len(client.json_calls) + len(client.text_calls)

    controller.advance(session)

    assert session.status == SessionStatus.ACTIVE
    assert session.showing_feedback is False
    assert session.current_question.text == "Vraag 2"
    assert len(client.json_calls) + len(client.text_calls) == calls


def test_full_session_finishes_with_summary(make_controller, economie, profile):
    replies = [turn_json(), turn_json(score=8), turn_json(score=4), turn_json(score=6)]
    controller, session, client = _active_session(
        make_controller, economie, profile, replies, limit=3, text_replies=["Mooi gedaan, Mila!"]
    )

    for _ in range(3):
        controller.submit_answer(session, "antwoord")
        controller.advance(session)

    assert session.status == SessionStatus.FINISHED
    assert session.score.total == 3
    assert session.score.correct == 2
    assert session.summary == "Mooi gedaan, Mila!"
    assert len(client.text_calls) == 1
    # the summary request is sent but never recorded
    assert len(client.text_calls[0]["contents"]) == len(session.log) + 1
    assert len(session.log) == 8

    with pytest.raises(SessionStateError):
        controller.submit_answer(session, "nog eentje")


def test_summary_failure_falls_back_to_generic_message(make_controller, economie, profile):
    controller, session, _ = _active_session(
        make_controller, economie, profile, [turn_json(), turn_json(score=9)], limit=1, text_replies=[ModelCallError("down")]
    )
    controller.submit_answer(session, "antwoord")

    controller.advance(session)

    assert session.status == SessionStatus.FINISHED
    assert "1 van de 1" in session.summary


def test_feedback_present_only_after_first_turn(make_controller, economie, profile):
    replies = [turn_json(), turn_json(score=7), turn_json(score=3)]
    controller, session, _ = _active_session(make_controller, economie, profile, replies, limit=5)
    turns = [session.current_turn]
    for _ in range(2):
        turns.append(controller.submit_answer(session, "antwoord"))
        controller.advance(session)

    assert [t.feedback is not None for t in turns] == [False, True, True]


def test_exam_mode_asks_for_real_exam_questions(make_controller, economie, profile):
    client = FakeModelClient(json_replies=[turn_json()])
    controller = make_controller(client)
    session = controller.open_session(economie, profile, SessionMode.EXAM)

    controller.start_session(session, "")

    prompt = client.json_calls[0]["contents"][0]["parts"][0]
    assert "echte vragen uit centrale eindexamens" in prompt


def test_reset_discards_log_and_score(make_controller, economie, profile):
    controller, session, _ = _active_session(make_controller, economie, profile, [turn_json(), turn_json(score=7)])
    controller.submit_answer(session, "antwoord")

    controller.reset_session(session)

    assert session.status == SessionStatus.SETUP
    assert len(session.log) == 0
    assert session.score.total == 0


class _BlockingClient(FakeModelClient):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.block = False

    def generate_json(self, contents, **kwargs):
        if self.block:
            self.entered.set()
            self.release.wait(timeout=5)
        return super().generate_json(contents, **kwargs)


def test_concurrent_submit_is_rejected(make_controller, economie, profile):
    client = _BlockingClient(json_replies=[turn_json(), turn_json(score=7)])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)
    controller.start_session(session, "")
    client.block = True
    errors = []

    def first_submit():
        try:
            controller.submit_answer(session, "eerste")
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    worker = threading.Thread(target=first_submit)
    worker.start()
    assert client.entered.wait(timeout=5)

    with pytest.raises(SessionBusyError):
        controller.submit_answer(session, "tweede")

    client.release.set()
    worker.join(timeout=5)
    assert errors == []
    assert len(session.log) == 4
    assert session.score.total == 1


class _LateGuard(InFlightGuard):
    """Holds one named thread back just before it takes the guard."""

    def __init__(self, thread_name):
        super().__init__()
        self.thread_name = thread_name
        self.arrived = threading.Event()
        self.go = threading.Event()

    @contextmanager
    def hold(self):
        if threading.current_thread().name == self.thread_name:
            self.arrived.set()
            self.go.wait(timeout=5)
        with super().hold():
            yield


def _run_late(session, call):
    """Start `call` on a thread that stalls at the guard; returns (finish, errors)."""
    guard = _LateGuard("late")
    session.guard = guard
    errors = []

    def target():
        try:
            call()
        except Exception as exc:  # surfaced through the caller's assertions
            errors.append(exc)

    worker = threading.Thread(target=target, name="late")
    worker.start()
    assert guard.arrived.wait(timeout=5)

    def finish():
        guard.go.set()
        worker.join(timeout=5)
        assert not worker.is_alive()

    return finish, errors


def test_late_submit_sees_state_left_by_earlier_submit(make_controller, economie, profile):
    controller, session, client = _active_session(
        make_controller, economie, profile, [turn_json(), turn_json(score=7), turn_json(score=3)], limit=1
    )
    finish, errors = _run_late(session, lambda: controller.submit_answer(session, "te laat"))

    controller.submit_answer(session, "op tijd")
    finish()

    assert len(errors) == 1
    assert isinstance(errors[0], SessionStateError)
    assert session.score.total == 1
    assert len(session.log) == 4
    assert len(client.json_calls) == 2


def test_late_start_does_not_add_second_setup_pair(make_controller, economie, profile):
    client = FakeModelClient(json_replies=[turn_json(), turn_json("Andere vraag")])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)
    finish, errors = _run_late(session, lambda: controller.start_session(session, "Markt"))

    controller.start_session(session, "Markt")
    finish()

    assert len(errors) == 1
    assert isinstance(errors[0], SessionStateError)
    assert len(session.log) == 2
    assert session.current_question.text == "Wat is prijselasticiteit?"
    assert len(client.json_calls) == 1


def test_late_finishing_advance_does_not_summarize_twice(make_controller, economie, profile):
    controller, session, client = _active_session(
        make_controller, economie, profile, [turn_json(), turn_json(score=8)], limit=1,
        text_replies=["Eerste samenvatting", "Tweede samenvatting"],
    )
    controller.submit_answer(session, "antwoord")
    finish, errors = _run_late(session, lambda: controller.advance(session))

    controller.advance(session)
    finish()

    assert errors == []
    assert session.status == SessionStatus.FINISHED
    assert session.summary == "Eerste samenvatting"
    assert len(client.text_calls) == 1


def test_summarize_requires_a_started_session(make_controller, economie, profile):
    client = FakeModelClient(text_replies=["Samenvatting"])
    controller = make_controller(client)
    session = controller.open_session(economie, profile)

    with pytest.raises(SessionStateError):
        controller.summarize(session)
    assert client.text_calls == []
    assert not session.guard.busy


def test_summarize_active_session(make_controller, economie, profile):
    controller, session, client = _active_session(
        make_controller, economie, profile, [turn_json()], text_replies=["Tussenstand: goed bezig."]
    )

    assert controller.summarize(session) == "Tussenstand: goed bezig."
    assert len(client.text_calls) == 1
