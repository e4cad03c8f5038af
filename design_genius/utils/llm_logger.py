"""
LLM Debug Logger for tracking all Gemini API calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis

Image bytes are never printed or written; they are replaced with a short
placeholder that records the MIME type and size.
"""

import json
import os
import sys
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def image_placeholder(mime_type: Optional[str], size: int) -> str:
    return f"[IMAGE_DATA: {mime_type or 'unknown'}, {size:,} bytes]"


class LLMLogger:
    """Centralized logger for Gemini API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "INFO").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.INFO

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "outputs"))

        self._initialized = True

    def configure(
        self,
        level: Optional[LogLevel] = None,
        log_to_file: Optional[bool] = None,
        log_dir: Optional[Path] = None,
    ):
        """Override environment configuration at runtime."""
        if level is not None:
            self.level = level
        if log_to_file is not None:
            self.log_to_file = log_to_file
        if log_dir is not None:
            self.log_dir = Path(log_dir)

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _serialize_part(self, part: Any) -> Any:
        """Serialize one content part, replacing inline image data."""
        if isinstance(part, str):
            if part.startswith("data:image/") and "base64," in part:
                header, payload = part.split("base64,", 1)
                return image_placeholder(header[len("data:"):].rstrip(";"), len(payload))
            return part
        if isinstance(part, (bytes, bytearray)):
            return image_placeholder(None, len(part))

        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None:
            data = getattr(inline_data, "data", None) or b""
            return image_placeholder(getattr(inline_data, "mime_type", None), len(data))

        text = getattr(part, "text", None)
        if text is not None:
            return text
        return str(part)

    def serialize_contents(self, contents: Any) -> List[Any]:
        """Serialize request contents (string, part, or list of either)."""
        if contents is None:
            return []
        if isinstance(contents, (list, tuple)):
            items = []
            for item in contents:
                parts = getattr(item, "parts", None)
                if parts is not None:
                    items.extend(self._serialize_part(p) for p in parts)
                else:
                    items.append(self._serialize_part(item))
            return items
        parts = getattr(contents, "parts", None)
        if parts is not None:
            return [self._serialize_part(p) for p in parts]
        return [self._serialize_part(contents)]

    def summarize_response(self, response: Any) -> str:
        """Text of a response with image parts replaced by placeholders."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates or getattr(candidates[0], "content", None) is None:
            return ""
        parts = getattr(candidates[0].content, "parts", None) or []
        return " ".join(str(self._serialize_part(p)) for p in parts)

    def _format_console_info(
        self,
        component: str,
        model: str,
        latency_ms: float,
        token_count: Optional[int] = None,
    ) -> str:
        """Format basic info line for console."""
        parts = [
            f"[{component}]",
            f"gemini/{model}",
            f"{latency_ms:.1f}ms",
        ]
        if token_count is not None:
            parts.append(f"{token_count} tokens")
        return " | ".join(parts)

    def _write_to_file(self, session_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not session_id:
            return

        log_file = self.log_dir / session_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def log_invocation(
        self,
        component: str,
        model: str,
        session_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of an API invocation.

        Returns:
            Invocation ID (UUID string) for tracking this call, empty when logging is off
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] 🔵 LLM Call: [{component}] gemini/{model}"
        if session_id:
            console_msg += f" | session: {session_id}"
        print(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        model: str,
        contents: Any,
        config: Any = None,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log request contents (DEBUG and above)."""
        if not self._should_log(LogLevel.DEBUG):
            return

        serialized = self.serialize_contents(contents)
        print(f"  Parts: {len(serialized)}")
        for i, item in enumerate(serialized[:3]):
            print(f"    {i+1}. {self._truncate_content(str(item), 150)}")
        if len(serialized) > 3:
            print(f"    ... and {len(serialized) - 3} more")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "request",
            "component": component,
            "invocation_id": invocation_id,
            "model": model,
            "session_id": session_id,
            "request": {
                "contents": serialized if self.level == LogLevel.TRACE else [],
                "part_count": len(serialized),
                "config": (
                    config.model_dump(exclude_none=True)
                    if hasattr(config, "model_dump") else config
                ) if self.level == LogLevel.TRACE else None,
            },
            "metadata": metadata or {},
        }
        self._write_to_file(session_id, log_entry)

    def log_response(
        self,
        invocation_id: str,
        component: str,
        model: str,
        response: Any,
        start_time: float,
        end_time: float,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log response with timing and token usage."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        content = self.summarize_response(response)

        token_usage = {}
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            token_usage = {
                "prompt_tokens": getattr(usage, "prompt_token_count", None),
                "completion_tokens": getattr(usage, "candidates_token_count", None),
                "total_tokens": getattr(usage, "total_token_count", None),
            }

        print(
            f"[{self._format_timestamp()}] ✅ LLM Response: "
            + self._format_console_info(component, model, latency_ms, token_usage.get("total_tokens"))
        )
        if self._should_log(LogLevel.DEBUG):
            print(f"  Response: {self._truncate_content(content, 200)}")
        if self._should_log(LogLevel.TRACE) and token_usage:
            for key, value in token_usage.items():
                print(f"    {key}: {value}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "response",
            "component": component,
            "invocation_id": invocation_id,
            "model": model,
            "session_id": session_id,
            "response": {
                "content": content if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(content, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(content),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage or None,
            "metadata": metadata or {},
        }
        self._write_to_file(session_id, log_entry)

    def log_error(
        self,
        component: str,
        error: BaseException,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log a failed API call."""
        if not self._should_log(LogLevel.INFO):
            return

        print(
            f"[{self._format_timestamp()}] ❌ LLM Error: [{component}] {type(error).__name__}: {error}",
            file=sys.stderr,
        )
        self._write_to_file(session_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "error",
            "component": component,
            "session_id": session_id,
            "error": {"type": type(error).__name__, "message": str(error)},
            "metadata": metadata or {},
        })

    def log_event(
        self,
        component: str,
        message: str,
        error: Optional[BaseException] = None,
        session_id: Optional[str] = None,
        severity: str = "warning",
    ):
        """Log a workflow-level event such as a swallowed failure or fallback."""
        if not self._should_log(LogLevel.INFO):
            return

        icon = "❌" if severity == "error" else "⚠️ "
        console_msg = f"[{self._format_timestamp()}] {icon} [{component}] {message}"
        if error is not None:
            console_msg += f": {type(error).__name__}: {error}"
        print(console_msg, file=sys.stderr)

        self._write_to_file(session_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": severity,
            "component": component,
            "session_id": session_id,
            "message": message,
            "error": (
                {"type": type(error).__name__, "message": str(error)}
                if error is not None else None
            ),
        })


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedGeminiModels:
    """
    Wrapper around ``client.aio.models`` to add debug logging.

    Intercepts generate_content() calls and logs requests, responses, timing,
    and errors. Everything else is delegated to the wrapped object.
    """

    def __init__(
        self,
        models: Any,
        component: str,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LoggedGeminiModels wrapper.

        Args:
            models: The async models API (``genai.Client(...).aio.models``)
            component: Component name (e.g., "research", "render", "refine")
            session_id: Optional session ID for file logs
            metadata: Optional additional metadata to include in logs
        """
        self.models = models
        self.component = component
        self.session_id = session_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped models API."""
        return getattr(self.models, name)

    def with_component(self, component: str, **metadata) -> "LoggedGeminiModels":
        """Same wrapped API, logged under a different component name."""
        return LoggedGeminiModels(
            models=self.models,
            component=component,
            session_id=self.session_id,
            metadata={**self.metadata, **metadata},
        )

    async def generate_content(self, *, model: str, contents: Any, config: Any = None, **kwargs) -> Any:
        """
        Call generate_content with logging.

        Returns:
            The API response
        """
        invocation_id = self.logger.log_invocation(
            component=self.component,
            model=model,
            session_id=self.session_id,
        )

        if invocation_id:
            self.logger.log_request(
                invocation_id=invocation_id,
                component=self.component,
                model=model,
                contents=contents,
                config=config,
                session_id=self.session_id,
                metadata=self.metadata,
            )

        start_time = time.time()
        try:
            response = await self.models.generate_content(
                model=model, contents=contents, config=config, **kwargs
            )
        except Exception as e:
            self.logger.log_error(self.component, e, session_id=self.session_id, metadata=self.metadata)
            raise
        end_time = time.time()

        if invocation_id:
            self.logger.log_response(
                invocation_id=invocation_id,
                component=self.component,
                model=model,
                response=response,
                start_time=start_time,
                end_time=end_time,
                session_id=self.session_id,
                metadata=self.metadata,
            )

        return response
