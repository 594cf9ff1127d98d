from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator

from ..errors import ValidationError

# PostgreSQL INTEGER range; salary and num_employees are INTEGER columns
MAX_INT4 = 2**31 - 1

NonEmptyStr = Annotated[str, Field(min_length=1, strict=True)]
Count = Annotated[int, Field(ge=0, le=MAX_INT4, strict=True)]

_url_adapter = TypeAdapter(HttpUrl)


def _check_url(value: Any) -> Any:
    # validate only; the stored URL keeps the caller's spelling
    if value is not None:
        try:
            _url_adapter.validate_python(value)
        except pydantic.ValidationError:
            raise ValueError("must be a valid http(s) URL") from None
    return value


def _check_equity(value: Any) -> Optional[str]:
    """Blank equity means none; otherwise a number between 0 and 1, kept as text for NUMERIC."""
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError("equity must be a number between 0 and 1")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError("equity must be a number between 0 and 1") from None
    if not number.is_finite() or number < 0 or number > 1:
        raise ValueError("equity must be a number between 0 and 1")
    return str(value).strip()


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("may not be null")
    return value


class CompanyNew(BaseModel):
    model_config = ConfigDict(extra="forbid")

    handle: Annotated[str, Field(min_length=1, max_length=25, pattern=r"^[a-z0-9_-]+$", strict=True)]
    name: NonEmptyStr
    description: Annotated[str, Field(strict=True)]
    numEmployees: Optional[Count] = None
    logoUrl: Optional[str] = None

    check_url = field_validator("logoUrl")(_check_url)


class CompanyUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[NonEmptyStr] = None
    description: Optional[Annotated[str, Field(strict=True)]] = None
    numEmployees: Optional[Count] = None
    logoUrl: Optional[str] = None

    not_null = field_validator("name", "description", mode="before")(_reject_null)
    check_url = field_validator("logoUrl")(_check_url)


class JobNew(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: NonEmptyStr
    salary: Optional[Count] = None
    equity: Optional[str] = None
    companyHandle: NonEmptyStr

    check_equity = field_validator("equity", mode="before")(_check_equity)


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[NonEmptyStr] = None
    salary: Optional[Count] = None
    equity: Optional[str] = None

    not_null = field_validator("title", mode="before")(_reject_null)
    check_equity = field_validator("equity", mode="before")(_check_equity)


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def validate_payload(schema: type[BaseModel], data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a request body against a schema.

    Returns the supplied fields only, cleaned, in the caller's key order so
    partial updates keep their parameter order.

    Raises:
        ValidationError: Wrong types, out-of-range values, bad URLs, missing
                         or unexpected fields
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"body: expected an object, got {type(data).__name__}")
    try:
        model = schema.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc

    cleaned = model.model_dump(exclude_unset=True)
    return {key: cleaned[key] for key in data}
