import asyncio
import io
import json
import time

import pytest
from PIL import Image

VALID_MACROS = {"calories": "250", "protein": "10g", "carbs": "30g", "fat": "8g"}


class FakeUploadedFile:
    def __init__(self, uri="https://generativelanguage.googleapis.com/v1beta/files/abc123", mime_type="image/png"):
        self.uri = uri
        self.mime_type = mime_type


class FakeResponse:
    def __init__(self, text):
        self._text = text

    @property
    def text(self):
        if self._text is None:
            raise ValueError("The response has no candidates.")
        return self._text


class FakeModel:
    def __init__(self, client):
        self.client = client

    async def generate_content_async(self, contents, generation_config=None, request_options=None):
        client = self.client
        client.generate_calls.append(
            {"contents": contents, "generation_config": generation_config, "request_options": request_options}
        )
        client.in_flight += 1
        client.max_in_flight = max(client.max_in_flight, client.in_flight)
        try:
            if client.generate_delay:
                await asyncio.sleep(client.generate_delay)
            if client.generate_error:
                raise client.generate_error
            return FakeResponse(client.response_text)
        finally:
            client.in_flight -= 1


class FakeGeminiClient:
    """Stands in for GeminiClient; records every call."""

    def __init__(self, response_text=json.dumps(VALID_MACROS), uploaded=None, timeout=5.0, max_concurrency=0):
        self.model_name = "gemini-2.5-flash-lite"
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.response_text = response_text
        self.uploaded = uploaded if uploaded is not None else FakeUploadedFile()
        self.upload_error = None
        self.generate_error = None
        self.upload_delay = 0
        self.generate_delay = 0
        self.upload_calls = []
        self.generate_calls = []
        self.system_instructions = []
        self.in_flight = 0
        self.max_in_flight = 0

    def upload_file(self, data, mime_type):
        self.upload_calls.append((data, mime_type))
        if self.upload_delay:
            time.sleep(self.upload_delay)
        if self.upload_error:
            raise self.upload_error
        return self.uploaded

    def generative_model(self, system_instruction):
        self.system_instructions.append(system_instruction)
        return FakeModel(self)


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def apple_png():
    """10x10 red PNG standing in for apple.png"""
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()
