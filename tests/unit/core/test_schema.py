"""Unit tests for schema adapters and JSON parsing."""

from typing import List

import pytest
from pydantic import BaseModel

from genflow_sdk.core.errors import JSONParseError, TypeValidationError
from genflow_sdk.core.schema import JsonSchema, PydanticSchema, UncheckedSchema, parse_json, safe_parse_json


class City(BaseModel):
    name: str
    population: int


PERSON_SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
    "required": ["name"],
}


class TestJsonSchema:
    def test_valid_value(self):
        result = JsonSchema(PERSON_SCHEMA).validate({"name": "Ada", "age": 36})
        assert result.success
        assert result.value == {"name": "Ada", "age": 36}

    def test_invalid_value(self):
        result = JsonSchema(PERSON_SCHEMA).validate({"age": "old"})
        assert not result.success
        assert isinstance(result.error, TypeValidationError)
        assert result.error.value == {"age": "old"}

    def test_rejects_malformed_schema(self):
        with pytest.raises(Exception):
            JsonSchema({"type": "no-such-type"})

    def test_to_json_schema(self):
        assert JsonSchema(PERSON_SCHEMA).to_json_schema() is PERSON_SCHEMA


class TestPydanticSchema:
    def test_converts_to_model(self):
        result = PydanticSchema(City).validate({"name": "Oslo", "population": "700000"})
        assert result.success
        assert result.value == City(name="Oslo", population=700000)

    def test_generic_types(self):
        result = PydanticSchema(List[int]).validate([1, 2, "3"])
        assert result.value == [1, 2, 3]

    def test_invalid_value(self):
        result = PydanticSchema(City).validate({"name": "Oslo"})
        assert not result.success
        assert isinstance(result.error, TypeValidationError)

    def test_json_schema(self):
        assert PydanticSchema(City).to_json_schema()["required"] == ["name", "population"]


class TestUncheckedSchema:
    def test_accepts_anything(self):
        assert UncheckedSchema().validate(object).success
        assert UncheckedSchema({"type": "string"}).to_json_schema() == {"type": "string"}


class TestParseJson:
    def test_without_schema(self):
        assert parse_json('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_invalid_json(self):
        with pytest.raises(JSONParseError) as exc_info:
            parse_json("{not json")
        assert exc_info.value.text == "{not json"

    def test_schema_failure(self):
        with pytest.raises(TypeValidationError):
            parse_json('{"name": 1}', JsonSchema(PERSON_SCHEMA))

    def test_safe_parse(self):
        assert safe_parse_json('{"name": "x"}', JsonSchema(PERSON_SCHEMA)).value == {"name": "x"}
        result = safe_parse_json("[")
        assert not result.success
        assert isinstance(result.error, JSONParseError)
