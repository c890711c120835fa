"""
Pydantic models for AI message requests and their result envelopes.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SendMessageRequest(BaseModel):
    """Body of POST /api/sendMessageWithFile."""

    message: StrictStr = Field(min_length=1)
    email_html: StrictStr = Field(min_length=1, alias="emailHTML")

    model_config = ConfigDict(populate_by_name=True)

    def combined_text(self) -> str:
        return f"{self.message}\n\n{self.email_html}"


class SendSuccess(CamelModel):
    """
    Successful model call.

    ``text`` is the reply with the first ``<emailhtml>`` block removed, and
    ``email_html`` is that block's trimmed content (None when the reply had no
    block). Exactly one of ``file_processed`` / ``files_processed`` is set for
    attachment calls; both stay None for plain-text calls.
    """

    success: Literal[True]
    text: str
    email_html: Optional[str]
    usage: Optional[Dict[str, int]]
    model: str
    user_id: Any
    file_processed: Optional[bool] = None
    files_processed: Optional[int] = None


class SendFailure(CamelModel):
    """Failed call. ``details`` keeps the original exception for diagnostics."""

    success: Literal[False]
    error: str
    details: Any
    user_id: Any

    @field_serializer("details")
    def _serialize_details(self, details: Any) -> Any:
        return describe_error(details)


SendResult = Union[SendSuccess, SendFailure]


def describe_error(error: Any) -> Any:
    """
    Turn an exception into a JSON-friendly dict.

    Provider errors from google-genai carry ``code`` and ``status``; those are
    kept when present. Non-exception values are returned unchanged.
    """
    if not isinstance(error, BaseException):
        return error

    described = {
        "type": type(error).__name__,
        "message": str(error),
    }
    for attr in ("code", "status"):
        value = getattr(error, attr, None)
        if value is not None:
            described[attr] = value
    return described
