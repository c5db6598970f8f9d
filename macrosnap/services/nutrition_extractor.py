import asyncio
import traceback
from contextlib import nullcontext
from typing import Optional

import google.generativeai as genai

from macrosnap.schemas.macro_schema import MacroSchema, UploadedImage
from macrosnap.services.errors import ExternalServiceError, UploadRejected

SYSTEM_INSTRUCTION = (
    "You are a food macro and calorie extractor. You will be provided an image of food "
    "and you should output the macros (calories, protein, carbs, fat) of the food shown. "
    "Return RAW JSON in this format: {calories, protein, carbs, fat}"
)

GENERATION_CONFIG = genai.GenerationConfig(
    response_mime_type="application/json",
    response_schema=MacroSchema,
)


class NutritionExtractor:
    def __init__(self, client):
        """
        client: GeminiClient (or anything with upload_file / generative_model,
        model_name, timeout and max_concurrency attributes).
        """
        self.client = client
        self.timeout = client.timeout
        max_concurrency = getattr(client, "max_concurrency", 0)
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def extract(self, image: UploadedImage) -> Optional[str]:
        """
        Uploads the image to Gemini and asks for the four macros as JSON.
        Returns the model's raw text (None when the response carries no text).
        Single attempt: every upstream failure is raised as ExternalServiceError.
        """
        async with self._semaphore or nullcontext():
            uploaded = await self._bounded(
                "file upload",
                asyncio.to_thread(self.client.upload_file, image.data, image.mime_type),
            )
            uri = getattr(uploaded, "uri", None)
            mime_type = getattr(uploaded, "mime_type", None)
            if not uri or not mime_type:
                print(f"[NutritionExtractor] upload returned no usable uri/mime type: {uploaded!r}")
                raise UploadRejected("Incorrect image format / uri")
            print(f"[NutritionExtractor] uploaded image: {uri} ({mime_type})")

            model = self.client.generative_model(SYSTEM_INSTRUCTION)
            response = await self._bounded(
                "generate content",
                model.generate_content_async(
                    [uploaded],
                    generation_config=GENERATION_CONFIG,
                    request_options={"timeout": self.timeout},
                ),
            )

        try:
            text = response.text
        except ValueError as e:
            # No candidates or no text part (e.g. blocked by safety filters)
            print(f"[NutritionExtractor] response carried no text: {e}")
            return None

        print(f"[NutritionExtractor] raw model output: {text}")
        return text

    async def _bounded(self, step: str, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            print(f"[NutritionExtractor] {step} exceeded {self.timeout}s")
            raise ExternalServiceError(f"Gemini {step} timed out after {self.timeout}s", reason="timeout")
        except Exception as e:
            print(f"[NutritionExtractor] {step} failed: {type(e).__name__} - {e}")
            traceback.print_exc()
            raise ExternalServiceError(f"Gemini {step} failed: {e}") from e
