from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, StrictStr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import ValidationError


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LiveEntry(CamelModel):
    stream_id: str
    text: str
    timestamp: int  # epoch milliseconds


class FinalizedTranscript(CamelModel):
    id: str
    stream_id: str
    text: str
    timestamp: int  # epoch milliseconds
    external_ref: Optional[str] = None
    pending: bool = True


def normalize_stream_id(value: Any) -> str:
    """Return the string form of a stream id; numeric ids are stringified."""
    if isinstance(value, bool):
        raise ValueError("streamId must be a string.")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError("streamId must be a string.")


def _pop_legacy(data: Dict[str, Any], legacy: str, current: str) -> None:
    # Older producers still send snake_case / numeric-channel field names
    if legacy in data and current not in data:
        data[current] = data.pop(legacy)


class WriteTextRequest(CamelModel):
    """Body of a live-text write or a finalize.

    Accepts the legacy `channel_id` and `uuid` field names used by older
    producers in place of `streamId` and `externalRef`.
    """

    text: str
    stream_id: Optional[str] = None
    timestamp: Optional[StrictInt] = None
    finalized: StrictBool = False
    external_ref: Optional[StrictStr] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            _pop_legacy(data, "channel_id", "streamId")
            _pop_legacy(data, "uuid", "externalRef")
        return data

    @field_validator("text", mode="before")
    @classmethod
    def _text_is_string(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("Text must be a string.")
        return v

    @field_validator("stream_id", mode="before")
    @classmethod
    def _stringify_stream_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return normalize_stream_id(v)


class StatusUpdateRequest(CamelModel):
    external_ref: Optional[StrictStr] = None
    pending: StrictBool

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            _pop_legacy(data, "uuid", "externalRef")
        return data

    @model_validator(mode="after")
    def _external_ref_required(self) -> "StatusUpdateRequest":
        if not self.external_ref:
            raise ValueError("externalRef is required.")
        return self


M = TypeVar("M", bound=BaseModel)


def _describe(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        # Raised by our own validators; the message is already user-facing
        return str(ctx_error)
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def parse_body(model: Type[M], payload: Any) -> M:
    """Validate a decoded JSON body, raising ValidationError on shape mismatch."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc
