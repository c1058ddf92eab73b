import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Generic, Iterator, Optional, TypeVar
from .conversation import ConversationLog
from .errors import SessionBusyError
from .models import PracticeTurn, SessionMode, SessionScore, SessionStatus, Subject, UserProfile

T = TypeVar("T")


class InFlightGuard:
	"""Single slot: at most one model call per owner at a time, extra callers are refused."""

	def __init__(self) -> None:
		self._lock = threading.Lock()

	@property
	def busy(self) -> bool:
		return self._lock.locked()

	def acquire(self) -> None:
		if not self._lock.acquire(blocking=False):
			raise SessionBusyError("a model call is already in flight")

	def release(self) -> None:
		self._lock.release()

	@contextmanager
	def hold(self) -> Iterator[None]:
		self.acquire()
		try:
			yield
		finally:
			self.release()


class PracticeSession:
	def __init__(self, subject: Subject, profile: UserProfile, mode: SessionMode, question_limit: int, session_id: str | None = None) -> None:
		self.session_id = session_id or str(uuid.uuid4())
		self.subject = subject
		self.profile = profile
		self.mode = mode
		self.question_limit = question_limit
		self.status = SessionStatus.SETUP
		self.topics = ""
		self.log = ConversationLog()
		self.score = SessionScore()
		self.current_turn: Optional[PracticeTurn] = None
		self.turn_count = 0
		self.showing_feedback = False
		self.summary: Optional[str] = None
		self.guard = InFlightGuard()

	@property
	def current_question(self):
		return self.current_turn.next_question if self.current_turn else None

	@property
	def pending_feedback(self):
		if self.showing_feedback and self.current_turn:
			return self.current_turn.feedback
		return None


class SessionStore(Generic[T]):
	"""In-memory registry; nothing here survives a restart."""

	def __init__(self) -> None:
		self.sessions: Dict[str, T] = {}

	def add(self, session_id: str, session: T) -> T:
		self.sessions[session_id] = session
		return session

	def has_session(self, session_id: str) -> bool:
		return session_id in self.sessions

	def get(self, session_id: str) -> T:
		return self.sessions[session_id]

	def discard(self, session_id: str) -> None:
		self.sessions.pop(session_id, None)

	def __len__(self) -> int:
		return len(self.sessions)
