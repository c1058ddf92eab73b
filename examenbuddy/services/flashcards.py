import logging
from typing import Optional
from ..config import settings
from ..errors import ExamBuddyError, FlashcardGenerationError
from ..models import Flashcard, FlashcardSet, Subject, UserProfile
from .prompt_builder import PromptBuilder
from .response_parser import parse_structured
from .schemas import FLASHCARD_SET_SCHEMA

logger = logging.getLogger("examenbuddy")


class FlashcardGenerator:
    def __init__(self, client, prompt_builder: PromptBuilder | None = None, count: int | None = None) -> None:
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.count = count or settings.flashcard_count

    def generate(self, subject: Subject, profile: UserProfile, topics: str = "") -> FlashcardSet:
        try:
            raw = self.client.generate_json(
                [{"role": "user", "parts": [self.prompt_builder.flashcard_prompt(subject, profile, topics, self.count)]}],
                system_instruction=self.prompt_builder.system_instruction(subject, profile),
                response_schema=FLASHCARD_SET_SCHEMA,
            )
            card_set = parse_structured(raw, FlashcardSet)
        except ExamBuddyError as exc:
            logger.warning({"event": "flashcard_generation_failed", "subject": subject.id, "error": str(exc)})
            raise FlashcardGenerationError("Kon geen kaarten genereren. Probeer het opnieuw.") from exc
        logger.debug({"event": "flashcards_generated", "subject": subject.id, "topic": card_set.topic, "count": len(card_set.cards)})
        return card_set


class FlashcardDeck:
    """Position and flip state while stepping through a FlashcardSet."""

    def __init__(self, card_set: FlashcardSet) -> None:
        self.card_set = card_set
        self.index = 0
        self.flipped = False

    def __len__(self) -> int:
        return len(self.card_set.cards)

    @property
    def current(self) -> Flashcard:
        return self.card_set.cards[self.index]

    @property
    def visible_text(self) -> str:
        return self.current.back if self.flipped else self.current.front

    @property
    def position(self) -> str:
        return f"{self.index + 1} / {len(self)}"

    @property
    def has_next(self) -> bool:
        return self.index < len(self) - 1

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    def flip(self) -> Flashcard:
        self.flipped = not self.flipped
        return self.current

    def next(self) -> Optional[Flashcard]:
        if not self.has_next:
            return None
        self.index += 1
        self.flipped = False
        return self.current

    def previous(self) -> Optional[Flashcard]:
        if not self.has_previous:
            return None
        self.index -= 1
        self.flipped = False
        return self.current
