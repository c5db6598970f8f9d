# Request/response shapes for macro analysis

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypedDict


@dataclass(frozen=True)
class UploadedImage:
    """Validated upload. Lives only for the request that produced it."""
    data: bytes
    mime_type: str
    filename: Optional[str] = None


class MacroSchema(TypedDict):
    """Response schema handed to Gemini. Every value is requested as text."""
    calories: str
    protein: str
    carbs: str
    fat: str


class MacroRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: str = Field(..., description="Estimated calories, e.g. '250 kcal'")
    protein: str = Field(..., description="Estimated protein, e.g. '10g'")
    carbs: str = Field(..., description="Estimated carbohydrates, e.g. '30g'")
    fat: str = Field(..., description="Estimated fat, e.g. '8g'")


class ResponseEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    data: Optional[MacroRecord] = None
    error: Optional[str] = Field(None, description="Error kind, set only on failure")
    status_code: int = Field(200, exclude=True)

    def to_content(self) -> dict:
        content = self.model_dump()
        if content["error"] is None:
            content.pop("error")
        return content
