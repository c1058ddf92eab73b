from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import List
import logging
from time import perf_counter
from datetime import datetime
from zoneinfo import ZoneInfo
from .catalog import SUBJECTS, get_subject
from .config import settings
from .errors import AnswerSubmitError, FlashcardGenerationError, SessionBusyError, SessionStartError, SessionStateError
from .models import (
	ChatView,
	DebugPromptResponse,
	FlashcardRequest,
	FlashcardSet,
	OpenChatRequest,
	OpenSessionRequest,
	SendMessageRequest,
	SessionView,
	StartSessionRequest,
	SubjectSummary,
	SubmitAnswerRequest,
	TopicsResponse,
	UserProfile,
)
from .services.chat import ChatConversation
from .services.flashcards import FlashcardGenerator
from .services.gemini_client import GeminiClient
from .services.practice_session import PracticeSessionController
from .services.profile_store import JsonFileKeyValueStore, ProfileStore
from .services.prompt_builder import PromptBuilder
from .services.topics import TopicSuggester, combine_topics
from .state import PracticeSession, SessionStore

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.DEBUG), format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("examenbuddy")

app = FastAPI(title="ExamenBuddy", default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

client = GeminiClient()
prompt_builder = PromptBuilder()
profile_store = ProfileStore(JsonFileKeyValueStore(settings.profile_store_path))
practice = PracticeSessionController(client, prompt_builder)
topic_suggester = TopicSuggester(client, prompt_builder)
flashcard_generator = FlashcardGenerator(client, prompt_builder)
chat_store: SessionStore[ChatConversation] = SessionStore()


@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"time": datetime.now(ZoneInfo("Europe/Amsterdam")).isoformat(),
		"model": settings.gemini_model,
		"api_key_configured": bool(settings.gemini_api_key),
		"default_question_limit": settings.default_question_limit,
		"passing_score": settings.passing_score,
	})


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response


@app.exception_handler(SessionBusyError)
async def busy_handler(request: Request, exc: SessionBusyError):
	return ORJSONResponse(status_code=409, content={"detail": "request_in_flight"})


@app.exception_handler(SessionStateError)
async def state_handler(request: Request, exc: SessionStateError):
	return ORJSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SessionStartError)
@app.exception_handler(AnswerSubmitError)
@app.exception_handler(FlashcardGenerationError)
async def retryable_handler(request: Request, exc: Exception):
	return ORJSONResponse(status_code=502, content={"detail": str(exc), "retryable": True})


def _subject_or_404(subject_id: str):
	try:
		return get_subject(subject_id)
	except KeyError:
		raise HTTPException(status_code=404, detail="subject_not_found")


def _require_profile() -> UserProfile:
	profile = profile_store.load()
	if profile is None:
		raise HTTPException(status_code=409, detail="profile_required")
	return profile


def _session_or_404(session_id: str) -> PracticeSession:
	if not practice.store.has_session(session_id):
		raise HTTPException(status_code=404, detail="session_not_found")
	return practice.store.get(session_id)


def _conversation_or_404(conversation_id: str) -> ChatConversation:
	if not chat_store.has_session(conversation_id):
		raise HTTPException(status_code=404, detail="conversation_not_found")
	return chat_store.get(conversation_id)


def _session_view(session: PracticeSession) -> SessionView:
	return SessionView(
		session_id=session.session_id,
		subject_id=session.subject.id,
		mode=session.mode,
		status=session.status,
		question_limit=session.question_limit,
		score=session.score,
		question=session.current_question,
		feedback=session.pending_feedback,
		showing_feedback=session.showing_feedback,
		summary=session.summary,
	)


def _chat_view(conversation: ChatConversation) -> ChatView:
	return ChatView(
		conversation_id=conversation.conversation_id,
		subject_id=conversation.subject.id,
		is_streaming=conversation.is_streaming,
		messages=conversation.messages,
	)


@app.get("/api/subjects", response_model=List[SubjectSummary])
def list_subjects():
	return [SubjectSummary(**s.model_dump(exclude={"prompt_context"})) for s in SUBJECTS]


@app.get("/api/profile", response_model=UserProfile)
def get_profile():
	profile = profile_store.load()
	if profile is None:
		raise HTTPException(status_code=404, detail="profile_not_found")
	return profile


@app.put("/api/profile", response_model=UserProfile)
def put_profile(profile: UserProfile):
	topic_suggester.clear()
	return profile_store.save(profile)


@app.delete("/api/profile", status_code=204)
def delete_profile():
	profile_store.clear()


@app.get("/api/subjects/{subject_id}/topics", response_model=TopicsResponse)
def get_topics(subject_id: str):
	subject = _subject_or_404(subject_id)
	profile = _require_profile()
	return TopicsResponse(topics=topic_suggester.suggest(subject, profile))


@app.post("/api/practice/sessions", response_model=SessionView, status_code=201)
def open_session(payload: OpenSessionRequest):
	subject = _subject_or_404(payload.subject_id)
	profile = _require_profile()
	session = practice.open_session(subject, profile, payload.mode, payload.question_limit)
	return _session_view(session)


@app.get("/api/practice/sessions/{session_id}", response_model=SessionView)
def get_session(session_id: str):
	return _session_view(_session_or_404(session_id))


@app.delete("/api/practice/sessions/{session_id}", status_code=204)
def close_session(session_id: str):
	practice.store.discard(session_id)
	logger.debug({"event": "session_closed", "session_id": session_id})


@app.post("/api/practice/sessions/{session_id}/start", response_model=SessionView)
def start_session(session_id: str, payload: StartSessionRequest):
	session = _session_or_404(session_id)
	practice.start_session(session, combine_topics(payload.topics, payload.custom_topic))
	return _session_view(session)


@app.post("/api/practice/sessions/{session_id}/answer", response_model=SessionView)
def submit_answer(session_id: str, payload: SubmitAnswerRequest):
	session = _session_or_404(session_id)
	practice.submit_answer(session, payload.answer)
	return _session_view(session)


@app.post("/api/practice/sessions/{session_id}/advance", response_model=SessionView)
def advance(session_id: str):
	session = _session_or_404(session_id)
	return _session_view(practice.advance(session))


@app.post("/api/practice/sessions/{session_id}/reset", response_model=SessionView)
def reset_session(session_id: str):
	session = _session_or_404(session_id)
	return _session_view(practice.reset_session(session))


@app.post("/api/flashcards", response_model=FlashcardSet)
def create_flashcards(payload: FlashcardRequest):
	subject = _subject_or_404(payload.subject_id)
	profile = _require_profile()
	return flashcard_generator.generate(subject, profile, combine_topics(payload.topics, payload.custom_topic))


@app.post("/api/chat", response_model=ChatView, status_code=201)
def open_chat(payload: OpenChatRequest):
	subject = _subject_or_404(payload.subject_id)
	profile = _require_profile()
	conversation = ChatConversation(client, subject, profile, prompt_builder)
	chat_store.add(conversation.conversation_id, conversation)
	logger.debug({"event": "chat_opened", "conversation_id": conversation.conversation_id, "subject": subject.id})
	return _chat_view(conversation)


@app.get("/api/chat/{conversation_id}", response_model=ChatView)
def get_chat(conversation_id: str):
	return _chat_view(_conversation_or_404(conversation_id))


@app.post("/api/chat/{conversation_id}/messages")
def send_message(conversation_id: str, payload: SendMessageRequest):
	conversation = _conversation_or_404(conversation_id)
	stream = conversation.send(payload.message, payload.image_base64, payload.mime_type)
	return StreamingResponse(stream, media_type="text/plain; charset=utf-8")


@app.get("/api/debug/prompt", response_model=DebugPromptResponse)
def get_debug_prompt(subject_id: str):
	subject = _subject_or_404(subject_id)
	profile = _require_profile()
	return DebugPromptResponse(prompt=prompt_builder.system_instruction(subject, profile))
