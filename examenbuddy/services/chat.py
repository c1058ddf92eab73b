"""Streaming chat tutor.

The model's reply arrives as text increments. `send` hands those increments to
the caller while growing one model message in the transcript, so a consumer
that stops early still leaves a complete (if short) message behind.
"""

import base64
import binascii
import logging
import uuid
from typing import Any, Callable, Dict, Iterator, List, Optional
from ..errors import ExamBuddyError, SessionStateError
from ..models import ChatMessage, Role, Subject, UserProfile
from ..state import InFlightGuard
from .prompt_builder import PromptBuilder

logger = logging.getLogger("examenbuddy")

APOLOGY = "Sorry, er ging iets mis bij het verbinden met de AI. Probeer het later opnieuw."
IMAGE_ONLY_PROMPT = "Analyseer deze afbeelding."


def welcome_text(subject: Subject, profile: UserProfile) -> str:
    return (
        f"Hoi {profile.name}! Ik ben je {subject.name} tutor voor {profile.level.upper()} {profile.year}. "
        "Waar kan ik je mee helpen?"
    )


def _data_url(image_base64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{image_base64}"


def _split_data_url(url: str) -> tuple[str, str] | None:
    if not url.startswith("data:") or "," not in url:
        return None
    header, data = url.split(",", 1)
    mime = header[5:].split(";", 1)[0]
    if not mime or not data:
        return None
    return mime, data


class ReplyStream:
    """Iterator over reply chunks that hands the conversation guard back exactly once.

    The guard is released when the stream ends, fails, is closed, or is
    garbage-collected, including when it is dropped before the first chunk.
    """

    def __init__(self, chunks: Iterator[str], release: Callable[[], None]) -> None:
        self._chunks = chunks
        self._release = release
        self._done = False

    def __iter__(self) -> "ReplyStream":
        return self

    def __next__(self) -> str:
        if self._done:
            raise StopIteration
        try:
            return next(self._chunks)
        except BaseException:
            self._finish()
            raise

    def _finish(self) -> None:
        if not self._done:
            self._done = True
            self._release()

    def close(self) -> None:
        try:
            self._chunks.close()
        finally:
            self._finish()

    def __del__(self) -> None:
        if not getattr(self, "_done", True):
            self.close()


class ChatConversation:
    def __init__(self, client, subject: Subject, profile: UserProfile, prompt_builder: PromptBuilder | None = None) -> None:
        self.conversation_id = str(uuid.uuid4())
        self.client = client
        self.subject = subject
        self.profile = profile
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.messages: List[ChatMessage] = [
            ChatMessage(id="welcome", role=Role.MODEL, text=welcome_text(subject, profile))
        ]
        self.guard = InFlightGuard()

    @property
    def is_streaming(self) -> bool:
        return self.guard.busy

    def _contents(self) -> List[Dict[str, Any]]:
        contents: List[Dict[str, Any]] = []
        for msg in self.messages:
            if msg.is_streaming:
                continue
            parts: List[Any] = []
            if msg.image_url and msg.role == Role.USER:
                split = _split_data_url(msg.image_url)
                if split:
                    mime, data = split
                    parts.append({"inline_data": {"mime_type": mime, "data": base64.b64decode(data)}})
            parts.append(msg.text)
            contents.append({"role": msg.role.value, "parts": parts})
        return contents

    def send(self, text: str, image_base64: Optional[str] = None, mime_type: Optional[str] = None) -> ReplyStream:
        """Record the user message and return the reply stream.

        Validation and the in-flight check happen right away, before the
        first chunk is requested.
        """
        text = (text or "").strip()
        if not text and not image_base64:
            raise SessionStateError("message must not be empty")
        image_url = None
        if image_base64:
            if not mime_type or not mime_type.startswith("image/"):
                raise SessionStateError("an image needs an image/* mime type")
            try:
                base64.b64decode(image_base64, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise SessionStateError("image is not valid base64") from exc
            image_url = _data_url(image_base64, mime_type)
        self.guard.acquire()
        self.messages.append(ChatMessage(
            id=str(uuid.uuid4()),
            role=Role.USER,
            text=text or IMAGE_ONLY_PROMPT,
            image_url=image_url,
        ))
        return ReplyStream(self._stream_reply(), self.guard.release)

    def _stream_reply(self) -> Iterator[str]:
        reply: Optional[ChatMessage] = None
        try:
            stream = self.client.stream_text(
                self._contents(),
                system_instruction=self.prompt_builder.system_instruction(self.subject, self.profile),
            )
            for chunk in stream:
                if reply is None:
                    reply = ChatMessage(id=str(uuid.uuid4()), role=Role.MODEL, text="", is_streaming=True)
                    self.messages.append(reply)
                reply.text += chunk
                yield chunk
        except ExamBuddyError as exc:
            logger.warning({"event": "chat_stream_failed", "conversation_id": self.conversation_id, "error": str(exc)})
            self.messages.append(ChatMessage(id=str(uuid.uuid4()), role=Role.MODEL, text=APOLOGY))
        finally:
            if reply is not None:
                reply.is_streaming = False
            logger.debug({"event": "chat_reply_done", "conversation_id": self.conversation_id, "chars": len(reply.text) if reply else 0})
