"""Practice and exam-drill sessions.

One session walks setup -> active -> finished. Each answer is graded and the
next question comes back in the same model response, so `advance` normally
needs no model call at all. Only the finishing `advance` makes one more call
for a summary.
"""

import logging
from typing import Optional
from ..config import settings
from ..errors import AnswerSubmitError, ExamBuddyError, SessionStartError, SessionStateError, SummaryError
from ..conversation import ConversationLog
from ..models import PracticeTurn, SessionMode, SessionScore, SessionStatus, Subject, UserProfile
from ..state import PracticeSession, SessionStore
from .prompt_builder import PromptBuilder
from .response_parser import parse_structured
from .schemas import PRACTICE_TURN_SCHEMA

logger = logging.getLogger("examenbuddy")

FALLBACK_SUMMARY = (
    "Goed gewerkt! Je hebt {correct} van de {total} vragen voldoende beantwoord. "
    "Bekijk de uitleg bij de vragen die nog lastig waren en oefen die onderwerpen nog een keer."
)


class PracticeSessionController:
    def __init__(self, client, prompt_builder: PromptBuilder | None = None, store: SessionStore | None = None, passing_score: int | None = None) -> None:
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.store: SessionStore[PracticeSession] = store if store is not None else SessionStore()
        self.passing_score = settings.passing_score if passing_score is None else passing_score

    def open_session(self, subject: Subject, profile: UserProfile, mode: SessionMode = SessionMode.PRACTICE, question_limit: Optional[int] = None) -> PracticeSession:
        limit = question_limit or settings.default_question_limit
        if limit < 1 or limit > settings.max_question_limit:
            raise SessionStateError(f"question_limit must be between 1 and {settings.max_question_limit}")
        session = PracticeSession(subject, profile, mode, limit)
        self.store.add(session.session_id, session)
        logger.debug({"event": "session_opened", "session_id": session.session_id, "subject": subject.id, "mode": mode.value, "question_limit": limit})
        return session

    def _system_instruction(self, session: PracticeSession) -> str:
        return self.prompt_builder.system_instruction(session.subject, session.profile)

    def _request_turn(self, session: PracticeSession, contents) -> tuple[PracticeTurn, str]:
        raw = self.client.generate_json(
            contents,
            system_instruction=self._system_instruction(session),
            response_schema=PRACTICE_TURN_SCHEMA,
            session_id=session.session_id,
        )
        return parse_structured(raw, PracticeTurn), raw

    def start_session(self, session: PracticeSession, topics: str = "") -> PracticeTurn:
        with session.guard.hold():
            if session.status != SessionStatus.SETUP:
                raise SessionStateError(f"cannot start a session that is {session.status.value}")
            request = self.prompt_builder.start_prompt(session.subject, session.profile, topics, session.mode)
            try:
                turn, raw = self._request_turn(session, [{"role": "user", "parts": [request]}])
            except ExamBuddyError as exc:
                logger.warning({"event": "session_start_failed", "session_id": session.session_id, "error": str(exc)})
                raise SessionStartError("Kon de toets niet starten. Probeer het opnieuw.") from exc
            if turn.feedback is not None:
                logger.debug({"event": "first_turn_feedback_dropped", "session_id": session.session_id})
                turn = turn.model_copy(update={"feedback": None})
            session.log.append_exchange(request, raw)
            session.topics = topics
            session.current_turn = turn
            session.turn_count = 1
            session.showing_feedback = False
            session.status = SessionStatus.ACTIVE
        logger.debug({"event": "session_started", "session_id": session.session_id, "topics": topics, "topic": turn.next_question.topic})
        return turn

    def submit_answer(self, session: PracticeSession, answer_text: str) -> PracticeTurn:
        answer = (answer_text or "").strip()
        if not answer:
            raise SessionStateError("answer must not be empty")
        with session.guard.hold():
            if session.status != SessionStatus.ACTIVE:
                raise SessionStateError(f"cannot answer in a session that is {session.status.value}")
            if session.showing_feedback:
                raise SessionStateError("feedback is pending, advance first")
            if session.score.total >= session.question_limit:
                raise SessionStateError("question limit reached")
            request = self.prompt_builder.answer_prompt(answer, session.profile, session.mode)
            try:
                turn, raw = self._request_turn(session, session.log.as_contents(extra=request))
            except ExamBuddyError as exc:
                logger.warning({"event": "answer_submit_failed", "session_id": session.session_id, "error": str(exc)})
                raise AnswerSubmitError("Er ging iets mis bij het nakijken. Probeer het opnieuw.") from exc
            if turn.feedback is None:
                logger.warning({"event": "answer_submit_failed", "session_id": session.session_id, "error": "feedback_missing"})
                raise AnswerSubmitError("Er ging iets mis bij het nakijken. Probeer het opnieuw.")
            session.log.append_exchange(request, raw)
            passed = turn.feedback.score >= self.passing_score
            session.score = session.score.model_copy(update={
                "total": session.score.total + 1,
                "correct": session.score.correct + (1 if passed else 0),
            })
            session.current_turn = turn
            session.turn_count += 1
            session.showing_feedback = True
        self._transcribe_answer(session, answer, turn)
        logger.debug({
            "event": "answer_graded",
            "session_id": session.session_id,
            "score": turn.feedback.score,
            "passed": passed,
            "correct": session.score.correct,
            "total": session.score.total,
        })
        return turn

    def _transcribe_answer(self, session: PracticeSession, answer: str, turn: PracticeTurn) -> None:
        append = getattr(self.client, "append_transcript", None)
        if append is None:
            return
        append(session.session_id, {
            "event": "answer",
            "answer": answer,
            "score": turn.feedback.score if turn.feedback else None,
            "is_correct": turn.feedback.is_correct if turn.feedback else None,
        })

    def advance(self, session: PracticeSession) -> PracticeSession:
        with session.guard.hold():
            if session.status == SessionStatus.FINISHED:
                return session
            if session.status != SessionStatus.ACTIVE:
                raise SessionStateError(f"cannot advance a session that is {session.status.value}")
            session.showing_feedback = False
            if session.score.total < session.question_limit:
                logger.debug({"event": "session_advanced", "session_id": session.session_id, "turn": session.turn_count})
                return session
            session.status = SessionStatus.FINISHED
            logger.debug({"event": "session_finished", "session_id": session.session_id, "correct": session.score.correct, "total": session.score.total})
            session.summary = self._summarize(session)
        return session

    def summarize(self, session: PracticeSession) -> str:
        """Closing feedback over the whole log; never raises for model trouble."""
        with session.guard.hold():
            if session.status not in (SessionStatus.ACTIVE, SessionStatus.FINISHED):
                raise SessionStateError(f"cannot summarize a session that is {session.status.value}")
            return self._summarize(session)

    def _summarize(self, session: PracticeSession) -> str:
        try:
            return self._request_summary(session)
        except SummaryError as exc:
            logger.warning({"event": "summary_failed", "session_id": session.session_id, "error": str(exc)})
            return FALLBACK_SUMMARY.format(correct=session.score.correct, total=session.score.total)

    def _request_summary(self, session: PracticeSession) -> str:
        request = self.prompt_builder.summary_prompt(session.score)
        try:
            text = self.client.generate_text(
                session.log.as_contents(extra=request),
                system_instruction=self._system_instruction(session),
                session_id=session.session_id,
            )
        except ExamBuddyError as exc:
            raise SummaryError(str(exc)) from exc
        text = (text or "").strip()
        if not text:
            raise SummaryError("summary_empty")
        return text

    def reset_session(self, session: PracticeSession) -> PracticeSession:
        with session.guard.hold():
            session.log = ConversationLog()
            session.score = SessionScore()
            session.current_turn = None
            session.turn_count = 0
            session.showing_feedback = False
            session.summary = None
            session.topics = ""
            session.status = SessionStatus.SETUP
        logger.debug({"event": "session_reset", "session_id": session.session_id})
        return session
