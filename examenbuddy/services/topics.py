import logging
from typing import Dict, Iterable, List, Tuple
from ..config import settings
from ..errors import ExamBuddyError, TopicFetchError
from ..models import Subject, UserProfile
from .prompt_builder import PromptBuilder
from .response_parser import parse_structured
from .schemas import TOPIC_LIST_SCHEMA

logger = logging.getLogger("examenbuddy")


def _norm(text: str) -> str:
	return (text or "").strip().lower()


def combine_topics(selected: Iterable[str], custom: str = "") -> str:
	"""Selected suggestions plus the freeform entry, comma-joined, blanks dropped."""
	parts = [t.strip() for t in list(selected) + [custom or ""]]
	return ", ".join(p for p in parts if p)


class TopicSuggester:
	def __init__(self, client, prompt_builder: PromptBuilder | None = None) -> None:
		self.client = client
		self.prompt_builder = prompt_builder or PromptBuilder()
		self._cache: Dict[Tuple[str, UserProfile], List[str]] = {}

	def suggest(self, subject: Subject, profile: UserProfile) -> List[str]:
		key = (subject.id, profile)
		if key in self._cache:
			logger.debug({"event": "topics_cache_hit", "subject": subject.id})
			return list(self._cache[key])
		try:
			topics = self._fetch(subject, profile)
		except TopicFetchError as exc:
			logger.warning({"event": "topic_fetch_failed", "subject": subject.id, "error": str(exc)})
			return []
		self._cache[key] = topics
		return list(topics)

	def _fetch(self, subject: Subject, profile: UserProfile) -> List[str]:
		try:
			raw = self.client.generate_json(
				[{"role": "user", "parts": [self.prompt_builder.topics_prompt(subject, profile)]}],
				system_instruction=self.prompt_builder.system_instruction(subject, profile),
				response_schema=TOPIC_LIST_SCHEMA,
			)
			candidates = parse_structured(raw, List[str])
		except ExamBuddyError as exc:
			raise TopicFetchError(str(exc)) from exc
		topics: List[str] = []
		seen: set[str] = set()
		for candidate in candidates:
			text = candidate.strip()
			if not text or _norm(text) in seen:
				continue
			seen.add(_norm(text))
			topics.append(text)
		if not topics:
			raise TopicFetchError("no_topics")
		if len(topics) < settings.topic_min:
			logger.debug({"event": "topics_below_minimum", "subject": subject.id, "count": len(topics)})
		return topics[:settings.topic_max]

	def clear(self) -> None:
		self._cache.clear()
