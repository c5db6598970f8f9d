# Error taxonomy of the image-to-macro pipeline


class MacroAnalysisError(Exception):
    """Base class. `kind` is the stable name reported in error envelopes."""

    kind = "MacroAnalysisError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class MissingImage(MacroAnalysisError):
    kind = "MissingImage"


class UploadRejected(MacroAnalysisError):
    kind = "UploadRejected"


class ExternalServiceError(MacroAnalysisError):
    kind = "ExternalServiceError"

    def __init__(self, message: str = "", reason: str = "upstream"):
        super().__init__(message)
        self.reason = reason  # "upstream" | "timeout"


class EmptyModelOutput(MacroAnalysisError):
    kind = "EmptyModelOutput"


class MalformedModelOutput(MacroAnalysisError):
    kind = "MalformedModelOutput"


class ServiceNotConfigured(MacroAnalysisError):
    kind = "ServiceNotConfigured"
