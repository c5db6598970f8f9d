import json
from typing import Optional

from macrosnap.schemas.macro_schema import MacroRecord
from macrosnap.services.errors import EmptyModelOutput, MalformedModelOutput

MACRO_KEYS = ("calories", "protein", "carbs", "fat")


def strip_code_fence(text: str) -> str:
    """Removes a ```json ... ``` wrapper (any case) if the model added one."""
    cleaned = text.strip()
    if cleaned[:len("```json")].lower() == "```json":
        cleaned = cleaned[len("```json"):].strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[len("```"):].strip()
    if cleaned.endswith("```"):
        cleaned = cleaned[:-len("```")].strip()
    return cleaned


def is_display_value(value) -> bool:
    # bool is an int subclass but "True" is not a quantity
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def parse_macros(raw: Optional[str]) -> MacroRecord:
    """
    Parses Gemini's text output into a MacroRecord.
    All four keys are required; partial records are rejected, and so are
    values that are not text or numbers (objects, arrays, booleans).
    """
    if raw is None or not raw.strip():
        raise EmptyModelOutput("Gemini returned an empty response.")

    cleaned = strip_code_fence(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        print(f"[ResponseParser] JSON parse failed: {e} | raw: {raw!r}")
        raise MalformedModelOutput(f"Gemini response is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise MalformedModelOutput(f"Expected a JSON object, got {type(data).__name__}.")

    missing = [key for key in MACRO_KEYS if data.get(key) is None]
    if missing:
        print(f"[ResponseParser] missing keys {missing} in: {data}")
        raise MalformedModelOutput(f"Gemini response is missing: {', '.join(missing)}")

    invalid = [key for key in MACRO_KEYS if not is_display_value(data[key])]
    if invalid:
        print(f"[ResponseParser] non-scalar values for {invalid} in: {data}")
        raise MalformedModelOutput(f"Gemini response has invalid values for: {', '.join(invalid)}")

    return MacroRecord(**{key: str(data[key]).strip() for key in MACRO_KEYS})
