import os
import json
import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, Iterator, List
import google.generativeai as genai
from ..config import settings
from ..errors import ModelCallError, StreamError
from .response_parser import strip_code_fences

logger = logging.getLogger("examenbuddy")

Contents = List[Dict[str, Any]]


class GeminiClient:
    """Every request the app sends to Gemini goes through here."""

    def __init__(self, api_key: str | None = None, model_name: str | None = None, transcript_dir: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        if self.api_key:
            genai.configure(api_key=self.api_key)
        self.model_name = model_name or settings.gemini_model
        self.transcript_dir = settings.transcript_dir if transcript_dir is None else transcript_dir

    def _transcript_path(self, session_id: str) -> str:
        return os.path.join(os.path.abspath(self.transcript_dir), f"session_{session_id}.jsonl")

    def append_transcript(self, session_id: str | None, record: Dict[str, Any]) -> None:
        if not session_id or not self.transcript_dir:
            return
        try:
            os.makedirs(os.path.abspath(self.transcript_dir), exist_ok=True)
            enriched = dict(record)
            enriched.setdefault("ts", datetime.now(timezone.utc).isoformat())
            with open(self._transcript_path(session_id), "a", encoding="utf-8") as f:
                f.write(json.dumps(enriched, ensure_ascii=False) + "\n")
        except OSError:
            logger.exception("transcript_write_failed")

    def _model(self, system_instruction: str, generation_config: Dict[str, Any]):
        if not self.api_key:
            logger.warning({"event": "gemini_no_api_key"})
            raise ModelCallError("gemini_api_key_missing")
        return genai.GenerativeModel(
            self.model_name,
            generation_config=generation_config,
            system_instruction=system_instruction,
        )

    def _response_text(self, response: Any) -> str:
        try:
            raw_text = (response.text or "").strip()
        except ValueError:
            # .text raises when the candidate has no simple text part
            raw_text = ""
        if not raw_text and getattr(response, "candidates", None):
            try:
                parts = response.candidates[0].content.parts
                raw_text = "".join(getattr(p, "text", "") for p in parts)
            except (AttributeError, IndexError):
                raw_text = ""
        return raw_text

    def _usage(self, response: Any) -> Dict[str, Any]:
        usage = getattr(response, "usage_metadata", None)
        return {
            "input_tokens": getattr(usage, "prompt_token_count", None),
            "output_tokens": getattr(usage, "candidates_token_count", None),
        }

    def _call(self, contents: Contents, system_instruction: str, generation_config: Dict[str, Any], session_id: str | None, kind: str) -> str:
        model = self._model(system_instruction, generation_config)
        self.append_transcript(session_id, {"event": "prompt", "kind": kind, "request": contents[-1] if contents else None})
        logger.debug({"event": "gemini_request", "model": self.model_name, "kind": kind, "turns": len(contents)})
        t0 = perf_counter()
        try:
            response = model.generate_content(contents)
        except Exception as exc:
            logger.exception("gemini_call_failed")
            raise ModelCallError(str(exc)) from exc
        latency_ms = int((perf_counter() - t0) * 1000)
        raw_text = self._response_text(response)
        usage = self._usage(response)
        logger.debug({"event": "gemini_response", "kind": kind, "preview": raw_text[:200], "latency_ms": latency_ms, **usage})
        self.append_transcript(session_id, {"event": "response", "kind": kind, "latency_ms": latency_ms, "text": raw_text, **usage})
        if not raw_text:
            raise ModelCallError("gemini_empty_response")
        return raw_text

    def generate_json(self, contents: Contents, *, system_instruction: str, response_schema: Dict[str, Any], session_id: str | None = None) -> str:
        generation_config = {
            "temperature": settings.practice_temperature,
            "response_mime_type": "application/json",
            "response_schema": response_schema,
        }
        return strip_code_fences(self._call(contents, system_instruction, generation_config, session_id, "json"))

    def generate_text(self, contents: Contents, *, system_instruction: str, session_id: str | None = None) -> str:
        generation_config = {"temperature": settings.chat_temperature}
        return self._call(contents, system_instruction, generation_config, session_id, "text")

    def stream_text(self, contents: Contents, *, system_instruction: str) -> Iterator[str]:
        model = self._model(system_instruction, {"temperature": settings.chat_temperature})
        logger.debug({"event": "gemini_stream_request", "model": self.model_name, "turns": len(contents)})
        t0 = perf_counter()
        chunks = 0
        try:
            for chunk in model.generate_content(contents, stream=True):
                try:
                    text = chunk.text
                except ValueError:
                    continue
                if text:
                    chunks += 1
                    yield text
        except Exception as exc:
            logger.exception("gemini_stream_failed")
            raise StreamError(str(exc)) from exc
        logger.debug({"event": "gemini_stream_done", "chunks": chunks, "latency_ms": int((perf_counter() - t0) * 1000)})
