from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EducationLevel = Literal["vmbo-tl", "havo", "vwo"]

# highest year is the final exam year for that level
LEVEL_YEARS = {"vmbo-tl": 4, "havo": 5, "vwo": 6}

DIFFICULTY_ALIASES = {
    "makkelijk": "easy",
    "gemiddeld": "medium",
    "moeilijk": "hard",
}


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


class SessionMode(str, Enum):
    PRACTICE = "practice"
    EXAM = "exam"


class SessionStatus(str, Enum):
    SETUP = "setup"
    ACTIVE = "active"
    FINISHED = "finished"


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    level: EducationLevel
    year: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @model_validator(mode="after")
    def _year_fits_level(self) -> "UserProfile":
        if self.year > LEVEL_YEARS[self.level]:
            raise ValueError(f"{self.level} has no year {self.year}")
        return self

    @property
    def is_exam_year(self) -> bool:
        return self.year == LEVEL_YEARS[self.level]


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    color_tag: str
    description: str
    prompt_context: str
    exam_domains: List[str]


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Attachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["text", "image"] = Field(alias="type")
    title: Optional[str] = None
    content: str


class QuizQuestion(BaseModel):
    text: str = Field(min_length=1)
    topic: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    source: Optional[str] = None
    hint: str = ""
    attachment: Optional[Attachment] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _map_dutch_difficulty(cls, value):
        if isinstance(value, str):
            norm = value.strip().lower()
            return DIFFICULTY_ALIASES.get(norm, norm)
        return value


class QuizFeedback(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_correct: bool = Field(alias="isCorrect")
    score: int = Field(ge=0, le=10)
    explanation: str
    model_answer: str = Field(alias="modelAnswer")


class PracticeTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    feedback: Optional[QuizFeedback] = None
    next_question: QuizQuestion = Field(alias="nextQuestion")


class SessionScore(BaseModel):
    correct: int = 0
    total: int = 0


class Flashcard(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    category: str = Field(min_length=1)


class FlashcardSet(BaseModel):
    topic: str = Field(min_length=1)
    cards: List[Flashcard] = Field(min_length=1)


class ChatMessage(BaseModel):
    id: str
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_streaming: bool = False
    image_url: Optional[str] = None


# --- HTTP payloads ---

class SubjectSummary(BaseModel):
    id: str
    name: str
    icon: str
    color_tag: str
    description: str
    exam_domains: List[str]


class TopicsResponse(BaseModel):
    topics: List[str]


class OpenSessionRequest(BaseModel):
    subject_id: str
    mode: SessionMode = SessionMode.PRACTICE
    question_limit: Optional[int] = Field(default=None, gt=0)


class StartSessionRequest(BaseModel):
    topics: List[str] = []
    custom_topic: str = ""


class SubmitAnswerRequest(BaseModel):
    answer: str


class SessionView(BaseModel):
    session_id: str
    subject_id: str
    mode: SessionMode
    status: SessionStatus
    question_limit: int
    score: SessionScore
    question: Optional[QuizQuestion] = None
    feedback: Optional[QuizFeedback] = None
    showing_feedback: bool = False
    summary: Optional[str] = None


class FlashcardRequest(BaseModel):
    subject_id: str
    topics: List[str] = []
    custom_topic: str = ""


class OpenChatRequest(BaseModel):
    subject_id: str


class ChatView(BaseModel):
    conversation_id: str
    subject_id: str
    is_streaming: bool
    messages: List[ChatMessage]


class SendMessageRequest(BaseModel):
    message: str = ""
    image_base64: Optional[str] = None
    mime_type: Optional[str] = None


class DebugPromptResponse(BaseModel):
    prompt: str
