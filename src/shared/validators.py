"""Shared request-validation types built on pydantic.

Request bodies and query strings are validated by pydantic models. When a
service is handed a plain mapping instead of a model, ``parse_model`` runs the
same model and turns its failures into ``{"field", "message"}`` records so
every problem in a payload is reported at once.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PositiveInt, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator

from src.core.config import settings
from src.core.exceptions import ValidationError, field_errors

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FieldError = dict[str, str]
ModelT = TypeVar("ModelT", bound=BaseModel)


def field_error(field: str, message: str) -> FieldError:
    return {"field": field, "message": message}


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _iso_date(value: Any) -> Any:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE.match(value.strip()):
        raise ValueError("must be a valid date in YYYY-MM-DD format")
    return value.strip()


IsoDate = Annotated[date, BeforeValidator(_iso_date)]

_iso_date_adapter = TypeAdapter(IsoDate)
_positive_int_adapter = TypeAdapter(PositiveInt)


def parse_date(value: Any) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` value, returning None when malformed."""
    try:
        return _iso_date_adapter.validate_python(value)
    except PydanticValidationError:
        return None


def parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return _positive_int_adapter.validate_python(value)
    except PydanticValidationError:
        return None


def parse_model(model: type[ModelT], data: Any) -> tuple[ModelT | None, list[FieldError]]:
    """Validate ``data`` against ``model``; return the instance or every field error."""
    if isinstance(data, model):
        return data, []
    try:
        return model.model_validate(data), []
    except PydanticValidationError as exc:
        return None, field_errors(exc.errors())


def validate_model(model: type[ModelT], data: Any) -> ModelT:
    instance, errors = parse_model(model, data)
    if errors:
        raise ValidationError(errors)
    return instance


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class QueryParams(RequestModel):
    """Query-string parameters: blank values count as absent."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if not is_blank(value)}
        return data


class PageParams(QueryParams):
    page: int = Field(1, ge=1, le=settings.max_page)
    limit: int = Field(settings.default_page_limit, ge=1, le=settings.max_page_limit)


class DateRangeParams(QueryParams):
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None

    @field_validator("end_date")
    @classmethod
    def _end_not_before_start(cls, value: date | None, info) -> date | None:
        start = info.data.get("start_date")
        if value is not None and start is not None and value < start:
            raise ValueError("end_date must not be before start_date")
        return value
