from typing import Optional

from macrosnap.schemas.macro_schema import UploadedImage
from macrosnap.services.errors import MissingImage

DEFAULT_MIME_TYPE = "application/octet-stream"


def validate_image(data: Optional[bytes], mime_type: Optional[str], filename: Optional[str] = None) -> UploadedImage:
    """
    Checks that an image was uploaded and is not empty.
    The media type is not filtered here; Gemini decides what it accepts.
    """
    if data is None:
        raise MissingImage("No file was uploaded.")
    if len(data) == 0:
        raise MissingImage(f"Uploaded file '{filename or ''}' is empty.")

    return UploadedImage(data=data, mime_type=mime_type or DEFAULT_MIME_TYPE, filename=filename)
