from typing import Any, Dict, List, Optional, Tuple
from .models import ConversationTurn, Role


class ConversationLog:
	"""Ordered (request, response) history sent back to the model on every call.

	Entries are never edited or removed. Roles strictly alternate, starting
	with the user request that opened the session.
	"""

	def __init__(self) -> None:
		self._turns: List[ConversationTurn] = []

	def __len__(self) -> int:
		return len(self._turns)

	def __iter__(self):
		return iter(self._turns)

	@property
	def turns(self) -> Tuple[ConversationTurn, ...]:
		return tuple(self._turns)

	def _expected_role(self) -> Role:
		if not self._turns or self._turns[-1].role == Role.MODEL:
			return Role.USER
		return Role.MODEL

	def record(self, role: Role, content: str) -> ConversationTurn:
		if role != self._expected_role():
			raise ValueError(f"expected a {self._expected_role().value} turn, got {role.value}")
		turn = ConversationTurn(role=role, content=content)
		self._turns.append(turn)
		return turn

	def append_exchange(self, request: str, response: str) -> None:
		if self._expected_role() != Role.USER:
			raise ValueError("log ends with an unanswered request")
		self._turns.append(ConversationTurn(role=Role.USER, content=request))
		self._turns.append(ConversationTurn(role=Role.MODEL, content=response))

	def as_contents(self, extra: Optional[str] = None) -> List[Dict[str, Any]]:
		"""Render as Gemini contents; `extra` is a pending user request that is not recorded."""
		contents = [{"role": t.role.value, "parts": [t.content]} for t in self._turns]
		if extra is not None:
			contents.append({"role": Role.USER.value, "parts": [extra]})
		return contents
