import traceback
from typing import Callable, Optional

from macrosnap.schemas.macro_schema import ResponseEnvelope
from macrosnap.services.errors import (
    EmptyModelOutput,
    ExternalServiceError,
    MacroAnalysisError,
    MalformedModelOutput,
    MissingImage,
    ServiceNotConfigured,
    UploadRejected,
)
from macrosnap.services.image_validator import validate_image
from macrosnap.services.nutrition_extractor import NutritionExtractor
from macrosnap.services.response_parser import parse_macros

SUCCESS_MESSAGE = "Success"
NO_FILE_MESSAGE = "No File Uploaded"
ANALYSIS_FAILED_MESSAGE = "Image Analysis Failed"
INVALID_OUTPUT_MESSAGE = "Invalid Model Output"


class AnalysisService:
    def __init__(self, extractor: Optional[NutritionExtractor] = None,
                 extractor_factory: Optional[Callable[[], NutritionExtractor]] = None):
        """
        Pass a ready extractor, or a factory that builds one on first use.
        The factory runs only after an upload has passed validation.
        """
        self._extractor = extractor
        self._extractor_factory = extractor_factory

    @property
    def extractor(self) -> NutritionExtractor:
        if self._extractor is None:
            if self._extractor_factory is None:
                raise ServiceNotConfigured("No NutritionExtractor was provided.")
            try:
                self._extractor = self._extractor_factory()
            except (ValueError, RuntimeError) as e:
                print(f"[AnalysisService] extractor initialization failed: {e}")
                traceback.print_exc()
                raise ServiceNotConfigured(str(e))
        return self._extractor

    async def analyze(self, data: Optional[bytes], mime_type: Optional[str], filename: Optional[str] = None) -> ResponseEnvelope:
        """
        Validate -> extract -> parse. Any stage failure short-circuits into an
        error envelope; nothing is raised to the caller.
        """
        print(f"\n--- [AnalysisService] analysis start ({filename}, {mime_type}) ---")
        try:
            image = validate_image(data, mime_type, filename)
            raw = await self.extractor.extract(image)
            macros = parse_macros(raw)
        except MacroAnalysisError as e:
            envelope = self.error_envelope(e)
            print(f"[AnalysisService] failed: {e.kind} - {e.message} -> {envelope.status_code}")
            return envelope
        finally:
            print("--- [AnalysisService] analysis end ---")

        print(f"[AnalysisService] macros: {macros.model_dump()}")
        return ResponseEnvelope(message=SUCCESS_MESSAGE, data=macros, status_code=200)

    @staticmethod
    def error_envelope(error: MacroAnalysisError) -> ResponseEnvelope:
        if isinstance(error, MissingImage):
            return ResponseEnvelope(message=NO_FILE_MESSAGE, error=error.kind, status_code=400)
        if isinstance(error, ServiceNotConfigured):
            return ResponseEnvelope(message=ANALYSIS_FAILED_MESSAGE, error=error.kind, status_code=503)
        if isinstance(error, ExternalServiceError) and error.reason == "timeout":
            return ResponseEnvelope(message=ANALYSIS_FAILED_MESSAGE, error=error.kind, status_code=504)
        if isinstance(error, (UploadRejected, ExternalServiceError)):
            return ResponseEnvelope(message=ANALYSIS_FAILED_MESSAGE, error=error.kind, status_code=502)
        if isinstance(error, (EmptyModelOutput, MalformedModelOutput)):
            return ResponseEnvelope(message=INVALID_OUTPUT_MESSAGE, error=error.kind, status_code=502)
        return ResponseEnvelope(message=ANALYSIS_FAILED_MESSAGE, error=error.kind, status_code=500)
