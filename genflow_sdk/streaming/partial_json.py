"""
Tolerant parsing of incomplete JSON text.

While an object is being streamed, the accumulated text is usually not valid
JSON yet (`{"name": "Al`). fix_json scans the text with a small state machine,
cuts it back to the last position that can be completed, and appends the
missing closing quotes, literals, braces and brackets.
"""

import json
import logging
import math
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

_LITERALS = ("true", "false", "null")

_OBJECT_STATES = {
    "OBJECT_START",
    "OBJECT_KEY",
    "OBJECT_AFTER_KEY",
    "OBJECT_BEFORE_VALUE",
    "OBJECT_AFTER_VALUE",
    "OBJECT_AFTER_COMMA",
}
_ARRAY_STATES = {"ARRAY_START", "ARRAY_AFTER_VALUE", "ARRAY_AFTER_COMMA"}


class _JsonFixer:
    def __init__(self, text: str):
        self.text = text
        self.stack: List[str] = ["ROOT"]
        self.last_valid_index = -1
        self.literal_start: Optional[int] = None

    def _start_value(self, char: str, index: int, next_state: str) -> None:
        if char == '"':
            self.last_valid_index = index
            self.stack[-1] = next_state
            self.stack.append("STRING")
        elif char in "ftn":
            self.last_valid_index = index
            self.literal_start = index
            self.stack[-1] = next_state
            self.stack.append("LITERAL")
        elif char == "-":
            self.stack[-1] = next_state
            self.stack.append("NUMBER")
        elif char.isdigit():
            self.last_valid_index = index
            self.stack[-1] = next_state
            self.stack.append("NUMBER")
        elif char == "{":
            self.last_valid_index = index
            self.stack[-1] = next_state
            self.stack.append("OBJECT_START")
        elif char == "[":
            self.last_valid_index = index
            self.stack[-1] = next_state
            self.stack.append("ARRAY_START")

    def _after_object_value(self, char: str, index: int) -> None:
        if char == ",":
            self.stack[-1] = "OBJECT_AFTER_COMMA"
        elif char == "}":
            self.last_valid_index = index
            self.stack.pop()

    def _after_array_value(self, char: str, index: int) -> None:
        if char == ",":
            self.stack[-1] = "ARRAY_AFTER_COMMA"
        elif char == "]":
            self.last_valid_index = index
            self.stack.pop()

    def _process(self, char: str, index: int) -> None:
        state = self.stack[-1]

        if state == "ROOT":
            self._start_value(char, index, "FINISH")
        elif state in ("OBJECT_START", "OBJECT_AFTER_COMMA"):
            if char == '"':
                self.stack[-1] = "OBJECT_KEY"
            elif char == "}" and state == "OBJECT_START":
                self.last_valid_index = index
                self.stack.pop()
        elif state == "OBJECT_KEY":
            if char == '"':
                self.stack[-1] = "OBJECT_AFTER_KEY"
            elif char == "\\":
                self.stack.append("KEY_ESCAPE")
        elif state == "KEY_ESCAPE":
            self.stack.pop()
        elif state == "OBJECT_AFTER_KEY":
            if char == ":":
                self.stack[-1] = "OBJECT_BEFORE_VALUE"
        elif state == "OBJECT_BEFORE_VALUE":
            self._start_value(char, index, "OBJECT_AFTER_VALUE")
        elif state == "OBJECT_AFTER_VALUE":
            self._after_object_value(char, index)
        elif state == "STRING":
            if char == '"':
                self.stack.pop()
                self.last_valid_index = index
            elif char == "\\":
                self.stack.append("STRING_ESCAPE")
            else:
                self.last_valid_index = index
        elif state == "STRING_ESCAPE":
            self.stack.pop()
            self.last_valid_index = index
        elif state == "ARRAY_START":
            if char == "]":
                self.last_valid_index = index
                self.stack.pop()
            else:
                self._start_value(char, index, "ARRAY_AFTER_VALUE")
        elif state == "ARRAY_AFTER_VALUE":
            self._after_array_value(char, index)
        elif state == "ARRAY_AFTER_COMMA":
            self._start_value(char, index, "ARRAY_AFTER_VALUE")
        elif state == "NUMBER":
            if char.isdigit():
                self.last_valid_index = index
            elif char in "eE.+-":
                pass
            else:
                self.stack.pop()
                self._end_token(char, index)
        elif state == "LITERAL":
            partial = self.text[self.literal_start:index + 1]
            if any(literal.startswith(partial) for literal in _LITERALS):
                self.last_valid_index = index
            else:
                self.stack.pop()
                self._end_token(char, index)

    def _end_token(self, char: str, index: int) -> None:
        # the character that ended a number or literal belongs to the container
        state = self.stack[-1]
        if state == "OBJECT_AFTER_VALUE":
            self._after_object_value(char, index)
        elif state == "ARRAY_AFTER_VALUE":
            self._after_array_value(char, index)

    def fix(self) -> str:
        for index, char in enumerate(self.text):
            if char.isspace() and self.stack[-1] not in ("STRING", "OBJECT_KEY", "STRING_ESCAPE", "KEY_ESCAPE"):
                if self.stack[-1] in ("NUMBER", "LITERAL"):
                    self.stack.pop()
                continue
            self._process(char, index)

        result = self.text[:self.last_valid_index + 1]

        for state in reversed(self.stack):
            if state == "STRING":
                result += '"'
            elif state in _OBJECT_STATES:
                result += "}"
            elif state in _ARRAY_STATES:
                result += "]"
            elif state == "LITERAL":
                partial = self.text[self.literal_start:]
                for literal in _LITERALS:
                    if literal.startswith(partial):
                        result += literal[len(partial):]
                        break

        return result


def fix_json(text: str) -> str:
    """Complete truncated JSON text so that it can be parsed."""
    return _JsonFixer(text).fix()


def parse_partial_json(text: Optional[str]) -> Any:
    """
    Best-effort parse of possibly incomplete JSON.

    Returns:
        The parsed value, or None if the text cannot be repaired
    """
    if text is None or text.strip() == "":
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(fix_json(text))
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse partial JSON: {e}")
        return None


def is_deep_equal_data(a: Any, b: Any) -> bool:
    """
    Structural equality for JSON-like data.

    Unlike `==`, booleans are not equal to numbers and dict key order is
    ignored but value types are compared strictly.
    """
    if a is b:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(is_deep_equal_data(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(is_deep_equal_data(x, y) for x, y in zip(a, b))
    if type(a) is not type(b):
        return False
    return a == b
