"""
Decoding of list endpoints.

List endpoints answer either with a bare JSON array or with a paginated
envelope ``{items, total, skip, limit}``; some builds of the RFID service
return a single object. All shapes are normalized to a plain list here.
"""

from __future__ import annotations

from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedResponseError

M = TypeVar("M", bound=BaseModel)


class ListEnvelope(BaseModel):
    items: list[Any]
    total: int | None = None
    skip: int | None = None
    limit: int | None = None


def _raw_items(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "items" in payload:
            try:
                return ListEnvelope.model_validate(payload).items
            except ValidationError as exc:
                raise MalformedResponseError(f"Invalid list envelope: {exc}", raw=str(payload)[:500]) from exc
        if "id" in payload:
            return [payload]
    raise MalformedResponseError(
        f"Expected a list or an items envelope, got {type(payload).__name__}",
        raw=str(payload)[:500],
    )


def decode_listing(payload: Any, model: Type[M]) -> List[M]:
    out: List[M] = []
    for raw in _raw_items(payload):
        try:
            out.append(model.model_validate(raw))
        except ValidationError as exc:
            raise MalformedResponseError(f"Invalid {model.__name__} in list: {exc}", raw=str(raw)[:500]) from exc
    return out


def decode_record(payload: Any, model: Type[M]) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(f"Invalid {model.__name__}: {exc}", raw=str(payload)[:500]) from exc
