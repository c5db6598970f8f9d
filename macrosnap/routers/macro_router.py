from typing import Union

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from macrosnap.schemas.macro_schema import ResponseEnvelope
from macrosnap.services.analysis_service import AnalysisService
from macrosnap.services.gemini_client import get_gemini_client
from macrosnap.services.nutrition_extractor import NutritionExtractor

router = APIRouter(prefix="/api/macros", tags=["macros"])

# Singleton AnalysisService instance
analysis_service_instance = None

def build_extractor() -> NutritionExtractor:
    return NutritionExtractor(get_gemini_client())

def get_analysis_service() -> AnalysisService:
    """Provides the shared AnalysisService. The Gemini client is built on the first valid upload."""
    global analysis_service_instance
    if analysis_service_instance is None:
        print("[Router] initializing AnalysisService singleton...")
        analysis_service_instance = AnalysisService(extractor_factory=build_extractor)
    return analysis_service_instance

@router.post("",
             summary="Extract macros from a food photo",
             description="Uploads the image to Gemini and returns calories, protein, carbs and fat.",
             response_model=ResponseEnvelope)
async def analyze_food(image: Union[UploadFile, str, None] = File(None),
                       service: AnalysisService = Depends(get_analysis_service)):
    """
    - **image**: food photo (multipart field `image`); a plain text value counts as no file
    - **return**: `{"message": "Success", "data": {calories, protein, carbs, fat}}`,
      or an error envelope with `data: null`
    """
    print("\n--- [Router] /api/macros request received ---")
    if image is None or isinstance(image, str):
        envelope = await service.analyze(None, None)
    else:
        envelope = await service.analyze(await image.read(), image.content_type, image.filename)

    print(f"--- [Router] /api/macros done ({envelope.status_code}) ---")
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_content())
