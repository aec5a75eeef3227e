"""
Failures that stop the pipeline for one request.

Document rule violations are not errors here: they are collected into a
ValidationOutcome and reported as part of a normal verdict.
"""

from typing import Any, Dict, Optional


class VerificationError(Exception):
    """Base error carrying a stable code and the HTTP status it maps to"""

    code = "VERIFICATION_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InputError(VerificationError):
    """A required image is missing, empty or unreadable"""

    code = "INPUT_ERROR"
    http_status = 400


class ExtractionIncompleteError(VerificationError):
    """The document was processed but no portrait could be recovered"""

    code = "EXTRACTION_INCOMPLETE"
    http_status = 422


class EngineCommunicationError(VerificationError):
    """An external engine was unreachable or answered with a transport-level failure"""

    code = "ENGINE_COMMUNICATION_ERROR"
    http_status = 502

    def __init__(self, engine: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{engine}: {message}")
        self.engine = engine
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["engine"] = self.engine
        if self.status_code is not None:
            data["engine_status_code"] = self.status_code
        return data


class NoComparableFacesError(VerificationError):
    """The matching engine returned no results for the image pair"""

    code = "NO_COMPARABLE_FACES"
    http_status = 422
