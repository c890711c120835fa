"""
Gemini text-generation client.

Sends user-composed email drafts to Gemini, optionally with inline file
attachments, and pulls an ``<emailhtml>`` block out of the reply.

Every send method returns a ``SendSuccess`` or ``SendFailure`` envelope and
never raises; only the constructor raises (missing API key). The client holds
no mutable state, so one instance can serve concurrent requests for any number
of users.
"""

import base64
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from google import genai
from google.genai import types

from mailcraft.models.message import SendFailure, SendResult, SendSuccess
from mailcraft.services.mime_types import DEFAULT_MIME_TYPE, mime_for

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

# Appended to every outbound message.
INSTRUCTION_SUFFIX = (
    " If the reply contains the HTML code of an email, output it wrapped in the"
    " <emailhtml> and </emailhtml> tags. If there is no such HTML, do not output"
    " or mention these tags."
)

EMAIL_HTML_PATTERN = re.compile(r"<emailhtml>([\s\S]*?)</emailhtml>")

HEALTH_CHECK_PROMPT = "Hello"
MODEL_INFO_PROMPT = "Tell me about your capabilities"

FileInput = Union[bytes, bytearray, memoryview, str, os.PathLike]


@dataclass(frozen=True)
class Attachment:
    """Binary payload plus its resolved MIME type."""

    data: bytes
    mime_type: str

    @property
    def base64_data(self) -> str:
        """Base64 text of the payload, as the SDK encodes it on the wire. For logging and diagnostics."""
        return base64.b64encode(self.data).decode("ascii")

    def to_part(self) -> types.Part:
        return types.Part.from_bytes(data=self.data, mime_type=self.mime_type)


def merge_config(
    defaults: Dict[str, Any],
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Shallow-merge generation options. Keys in ``overrides`` win.

    Nested dicts are replaced wholesale, not merged: an override of
    ``thinking_config`` replaces the default ``thinking_config`` entirely.
    """
    merged = dict(defaults)
    for key, value in (overrides or {}).items():
        merged[key] = value
    return merged


def extract_email_html(reply: str) -> Tuple[str, Optional[str]]:
    """
    Split a model reply into (text, email_html).

    Only the first ``<emailhtml>...</emailhtml>`` pair is considered. When it is
    found, its trimmed content becomes ``email_html`` and the pair is removed
    from the reply, which is then trimmed. When it is not found the reply is
    returned verbatim, untrimmed, with ``email_html`` None.
    """
    match = EMAIL_HTML_PATTERN.search(reply)
    if not match:
        return reply, None

    cleaned = reply[:match.start()] + reply[match.end():]
    return cleaned.strip(), match.group(1).strip()


def _normalize_base64(payload: str) -> str:
    payload = payload.strip().translate(str.maketrans("-_", "+/"))
    return payload + "=" * (-len(payload) % 4)


def _decode_data_uri(uri: str, mime_type: Optional[str]) -> Attachment:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ValueError("Malformed data URI: missing ',' separator")

    if not mime_type:
        header_match = re.match(r"data:([^;,]+)", header)
        mime_type = header_match.group(1) if header_match else None

    return Attachment(
        # Accept the URL-safe alphabet and missing padding, as browsers and Node do
        data=base64.b64decode(_normalize_base64(payload)),
        mime_type=mime_type or DEFAULT_MIME_TYPE,
    )


def resolve_attachment(file: FileInput, mime_type: Optional[str] = None) -> Attachment:
    """
    Normalize one attachment to bytes + MIME type.

    Args:
        file: Raw bytes, a ``data:<mime>;base64,<payload>`` string, or a
            filesystem path. Any string that is not a data URI is treated as a
            path; no sandboxing is applied.
        mime_type: Explicit MIME type; wins over anything inferred.

    Raises:
        FileNotFoundError: Path does not exist.
        TypeError: Input is none of the supported shapes.
        ValueError: Malformed data URI or base64 payload.
    """
    if isinstance(file, (bytes, bytearray, memoryview)):
        return Attachment(data=bytes(file), mime_type=mime_type or DEFAULT_MIME_TYPE)

    if isinstance(file, str) and file.startswith("data:"):
        return _decode_data_uri(file, mime_type)

    if isinstance(file, (str, os.PathLike)):
        path = os.fspath(file)
        if not os.path.exists(path):
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "rb") as fh:
            data = fh.read()
        return Attachment(data=data, mime_type=mime_type or mime_for(path))

    raise TypeError(f"Unsupported file type: {type(file).__name__}")


def _usage_from_response(response: Any) -> Optional[Dict[str, int]]:
    """Map Gemini usage metadata to token counts."""
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None

    fields = {
        "input_tokens": getattr(metadata, "prompt_token_count", None),
        "output_tokens": getattr(metadata, "candidates_token_count", None),
        "thinking_tokens": getattr(metadata, "thoughts_token_count", None),
        "total_tokens": getattr(metadata, "total_token_count", None),
    }
    return {key: value for key, value in fields.items() if isinstance(value, int)}


def _error_message(exc: Exception) -> str:
    # google-genai APIError exposes the provider's message separately from str()
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__


class GeminiClient:
    """
    Thin wrapper over ``google.genai.Client`` for email drafting.

    Args:
        api_key: Gemini API key. Required.
        model: Default model for calls that do not pass one.
        thinking_budget: Default thinking budget (0 disables thinking).
        config: Extra generation options merged over the thinking default.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        thinking_budget: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        if not api_key:
            raise ValueError("API key is required")

        self.default_model = model or DEFAULT_MODEL
        self.default_config = merge_config(
            {"thinking_config": {"thinking_budget": thinking_budget or 0}},
            config,
        )
        self._client = genai.Client(api_key=api_key)

    async def send_message(
        self,
        message: str,
        *,
        user_id: Any = None,
        model: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> SendResult:
        """Send a plain-text message."""
        try:
            prompt = message + INSTRUCTION_SUFFIX
            return await self._generate(prompt, user_id=user_id, model=model, config=config)
        except Exception as exc:
            return self._failure(exc, user_id)

    async def send_message_with_file(
        self,
        message: str,
        file: FileInput,
        *,
        user_id: Any = None,
        model: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        mime_type: Optional[str] = None,
    ) -> SendResult:
        """Send a message with one inline attachment."""
        try:
            prompt = message + INSTRUCTION_SUFFIX
            attachment = resolve_attachment(file, mime_type)
            contents = [
                types.Content(
                    role="user",
                    parts=[types.Part.from_text(text=prompt), attachment.to_part()],
                )
            ]
            return await self._generate(
                contents,
                user_id=user_id,
                model=model,
                config=config,
                file_processed=True,
            )
        except Exception as exc:
            return self._failure(exc, user_id)

    async def send_message_with_files(
        self,
        message: str,
        files: Iterable[FileInput],
        *,
        user_id: Any = None,
        model: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> SendResult:
        """
        Send a message with several inline attachments, in order.

        Every attachment is resolved before Gemini is called. If any of them
        fails, nothing is sent.
        """
        try:
            prompt = message + INSTRUCTION_SUFFIX
            attachments = [resolve_attachment(file) for file in files]
            parts = [types.Part.from_text(text=prompt)]
            parts.extend(attachment.to_part() for attachment in attachments)
            contents = [types.Content(role="user", parts=parts)]
            return await self._generate(
                contents,
                user_id=user_id,
                model=model,
                config=config,
                files_processed=len(attachments),
            )
        except Exception as exc:
            return self._failure(exc, user_id)

    async def check_health(self) -> bool:
        """Return True if Gemini answers a trivial prompt."""
        try:
            result = await self.send_message(HEALTH_CHECK_PROMPT)
            return result.success
        except Exception:
            return False

    async def get_model_info(self, model: Optional[str] = None) -> Dict[str, Any]:
        """Ask the model to describe itself."""
        model_name = model or self.default_model
        try:
            result = await self.send_message(MODEL_INFO_PROMPT, model=model_name)
            if not result.success:
                return {"model": model_name, "available": False, "error": result.error}
            return {
                "model": model_name,
                "available": True,
                "capabilities": result.text,
            }
        except Exception as exc:
            return {"model": model_name, "available": False, "error": _error_message(exc)}

    async def _generate(
        self,
        contents: Union[str, list],
        *,
        user_id: Any,
        model: Optional[str],
        config: Optional[Dict[str, Any]],
        **flags: Any,
    ) -> SendSuccess:
        model_name = model or self.default_model
        logger.info(f"Gemini request: model={model_name}, user_id={user_id}")

        response = await self._client.aio.models.generate_content(
            model=model_name,
            contents=contents,
            config=merge_config(self.default_config, config),
        )

        reply = response.text
        if reply is None:
            raise ValueError("Gemini returned an empty response")

        text, email_html = extract_email_html(reply)
        return SendSuccess(
            success=True,
            text=text,
            email_html=email_html,
            usage=_usage_from_response(response),
            model=model_name,
            user_id=user_id,
            **flags,
        )

    @staticmethod
    def _failure(exc: Exception, user_id: Any) -> SendFailure:
        logger.warning(f"Gemini request failed for user_id={user_id}: {exc}")
        return SendFailure(
            success=False,
            error=_error_message(exc),
            details=exc,
            user_id=user_id,
        )
