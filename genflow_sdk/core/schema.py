"""
Schema adapters and JSON parsing helpers.

The SDK does not validate values itself; it delegates to a Schema. Three
adapters are provided:

- JsonSchema: a JSON schema checked with `jsonschema` (Draft 2020-12)
- PydanticSchema: any type pydantic can validate (models, lists, unions, ...)
- UncheckedSchema: accepts every value, optionally carrying a JSON schema
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

import pydantic
from jsonschema import Draft202012Validator

from .errors import JSONParseError, TypeValidationError, ValidationError

T = TypeVar("T")


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of Schema.validate."""
    success: bool
    value: Optional[T] = None
    error: Optional[ValidationError] = None


class Schema(ABC, Generic[T]):
    """Validator contract consumed by the SDK."""

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult[T]:
        """Validate `value`, returning the (possibly converted) value on success."""
        pass

    @abstractmethod
    def to_json_schema(self) -> Dict[str, Any]:
        """JSON schema description for providers that need one."""
        pass


class JsonSchema(Schema[Any]):
    """Schema backed by a JSON schema document."""

    def __init__(self, json_schema: Dict[str, Any]):
        Draft202012Validator.check_schema(json_schema)
        self.json_schema = json_schema
        self._validator = Draft202012Validator(json_schema)

    def validate(self, value: Any) -> ValidationResult[Any]:
        errors = sorted(self._validator.iter_errors(value), key=lambda e: list(e.absolute_path))
        if not errors:
            return ValidationResult(success=True, value=value)
        return ValidationResult(success=False, error=TypeValidationError(value, cause=errors[0]))

    def to_json_schema(self) -> Dict[str, Any]:
        return self.json_schema


class PydanticSchema(Schema[T]):
    """Schema backed by a pydantic TypeAdapter."""

    def __init__(self, type_: Any):
        self.type_ = type_
        self._adapter = pydantic.TypeAdapter(type_)

    def validate(self, value: Any) -> ValidationResult[T]:
        try:
            return ValidationResult(success=True, value=self._adapter.validate_python(value))
        except pydantic.ValidationError as e:
            return ValidationResult(success=False, error=TypeValidationError(value, cause=e))

    def to_json_schema(self) -> Dict[str, Any]:
        return self._adapter.json_schema()


class UncheckedSchema(Schema[Any]):
    """Schema that accepts every value."""

    def __init__(self, json_schema: Optional[Dict[str, Any]] = None):
        self.json_schema = json_schema or {}

    def validate(self, value: Any) -> ValidationResult[Any]:
        return ValidationResult(success=True, value=value)

    def to_json_schema(self) -> Dict[str, Any]:
        return self.json_schema


def parse_json(text: str, schema: Optional[Schema[T]] = None) -> Any:
    """
    Parse JSON text and validate it against `schema` if given.

    Raises:
        JSONParseError: If the text is not valid JSON
        TypeValidationError: If the value does not satisfy the schema
    """
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise JSONParseError(text, cause=e) from e

    if schema is None:
        return value

    result = schema.validate(value)
    if not result.success:
        raise result.error
    return result.value


def safe_parse_json(text: str, schema: Optional[Schema[T]] = None) -> ValidationResult[Any]:
    """Like parse_json, but returns a ValidationResult instead of raising."""
    try:
        return ValidationResult(success=True, value=parse_json(text, schema))
    except ValidationError as e:
        return ValidationResult(success=False, error=e)
