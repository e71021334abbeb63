from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ParsedValue(Generic[T]):
    value: T


@dataclass(frozen=True)
class ParseError:
    reason: str
    position: Optional[int] = None


ParseResult = Union[ParsedValue[T], ParseError]


def describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'row'}: {item['msg']}"
        for item in error.errors()
    )


def parse_model(
    model: type[M], raw: Mapping[str, Any], position: Optional[int] = None
) -> ParseResult[M]:
    """
    Validate a raw mapping into `model`.
    Never raises on bad input: callers decide what a ParseError means.
    """
    try:
        return ParsedValue(model.model_validate(dict(raw)))
    except ValidationError as e:
        return ParseError(reason=describe_validation_error(e), position=position)
