import pytest

from conftest import FakeGeminiClient, FakeUploadedFile
from macrosnap.services.analysis_service import AnalysisService
from macrosnap.services.nutrition_extractor import NutritionExtractor


class RecordingExtractor:
    def __init__(self, raw=None):
        self.raw = raw
        self.calls = 0

    async def extract(self, image):
        self.calls += 1
        return self.raw


def service_for(client):
    return AnalysisService(NutritionExtractor(client))


async def test_success(fake_client, apple_png):
    envelope = await service_for(fake_client).analyze(apple_png, "image/png", "apple.png")

    assert envelope.status_code == 200
    assert envelope.message == "Success"
    assert envelope.error is None
    content = envelope.to_content()
    assert content == {"message": "Success", "data": content["data"]}
    assert set(content["data"]) == {"calories", "protein", "carbs", "fat"}
    assert all(isinstance(v, str) and v for v in content["data"].values())


@pytest.mark.parametrize("data", [None, b""])
async def test_missing_image_skips_extraction(data):
    extractor = RecordingExtractor()
    envelope = await AnalysisService(extractor).analyze(data, "image/png", "empty.png")

    assert extractor.calls == 0
    assert envelope.status_code == 400
    assert envelope.to_content() == {"message": "No File Uploaded", "data": None, "error": "MissingImage"}


async def test_malformed_model_output(apple_png):
    envelope = await service_for(FakeGeminiClient(response_text="{calories: 100}")).analyze(apple_png, "image/png")

    assert envelope.status_code == 502
    assert envelope.message == "Invalid Model Output"
    assert envelope.error == "MalformedModelOutput"
    assert envelope.data is None


async def test_empty_model_output(apple_png):
    envelope = await service_for(FakeGeminiClient(response_text="")).analyze(apple_png, "image/png")

    assert envelope.status_code == 502
    assert envelope.error == "EmptyModelOutput"


async def test_upload_rejected(apple_png):
    client = FakeGeminiClient(uploaded=FakeUploadedFile(uri=None))
    envelope = await service_for(client).analyze(apple_png, "image/png")

    assert envelope.status_code == 502
    assert envelope.message == "Image Analysis Failed"
    assert envelope.error == "UploadRejected"


async def test_upstream_failure(fake_client, apple_png):
    fake_client.generate_error = RuntimeError("500 internal error")
    envelope = await service_for(fake_client).analyze(apple_png, "image/png")

    assert envelope.status_code == 502
    assert envelope.error == "ExternalServiceError"


async def test_upstream_timeout(apple_png):
    client = FakeGeminiClient(timeout=0.05)
    client.generate_delay = 1
    envelope = await service_for(client).analyze(apple_png, "image/png")

    assert envelope.status_code == 504
    assert envelope.error == "ExternalServiceError"


async def test_extractor_factory_not_called_for_missing_image():
    built = []
    service = AnalysisService(extractor_factory=lambda: built.append("extractor"))

    envelope = await service.analyze(None, None)

    assert envelope.status_code == 400
    assert built == []


async def test_extractor_factory_failure(apple_png):
    def failing_factory():
        raise ValueError("GEMINI_API_KEY was not found in the environment.")

    envelope = await AnalysisService(extractor_factory=failing_factory).analyze(apple_png, "image/png")

    assert envelope.status_code == 503
    assert envelope.to_content() == {"message": "Image Analysis Failed", "data": None, "error": "ServiceNotConfigured"}


async def test_extractor_factory_used_once(fake_client, apple_png):
    built = []

    def factory():
        built.append("extractor")
        return NutritionExtractor(fake_client)

    service = AnalysisService(extractor_factory=factory)
    await service.analyze(apple_png, "image/png")
    envelope = await service.analyze(apple_png, "image/png")

    assert envelope.status_code == 200
    assert built == ["extractor"]
