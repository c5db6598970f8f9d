from dotenv import load_dotenv
import google.generativeai as genai
import os
import io
import traceback

load_dotenv()

DEFAULT_MODEL_NAME = "gemini-2.5-flash-lite"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


class GeminiClient:
    def __init__(self, api_key=None, model_name=None, timeout=None, max_concurrency=None):
        """
        Single handle to the Gemini API, shared by every request.
        Arguments left as None are read from the environment (.env supported).
        """
        print("\n--- [GeminiClient] initialization start ---")
        try:
            api_key = api_key or os.getenv("GEMINI_API_KEY")
            if not api_key:
                print("[GeminiClient] error: environment variable 'GEMINI_API_KEY' not found.")
                raise ValueError("GEMINI_API_KEY was not found in the environment.")

            genai.configure(api_key=api_key)
            print("[GeminiClient] Gemini API configured.")

            self.model_name = model_name or os.getenv("GEMINI_MODEL") or DEFAULT_MODEL_NAME
            self.timeout = timeout if timeout is not None else _env_float("GEMINI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
            self.max_concurrency = (
                max_concurrency if max_concurrency is not None else _env_int("GEMINI_MAX_CONCURRENCY", 0)
            )
            print(f"[GeminiClient] model='{self.model_name}', timeout={self.timeout}s, "
                  f"max_concurrency={self.max_concurrency or 'unbounded'}")

        except ValueError as ve:
            print(f"[GeminiClient] configuration error: {ve}")
            raise ve
        except Exception as e:
            print(f"[GeminiClient] unexpected error: {type(e).__name__} - {e}")
            traceback.print_exc()
            raise RuntimeError(f"Gemini client initialization failed: {e}")
        finally:
            print("--- [GeminiClient] initialization end ---")

    def upload_file(self, data: bytes, mime_type: str):
        """Uploads raw bytes to the Gemini file API. Blocking; returns a File with uri/mime_type."""
        return genai.upload_file(io.BytesIO(data), mime_type=mime_type)

    def generative_model(self, system_instruction: str):
        return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)


# Lazily-built singleton
gemini_client_instance = None


def get_gemini_client() -> GeminiClient:
    global gemini_client_instance
    if gemini_client_instance is None:
        print("[GeminiClient] building shared client...")
        gemini_client_instance = GeminiClient()
    return gemini_client_instance
