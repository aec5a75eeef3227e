from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class EngineStatus(str, Enum):
    """Overall confidence verdict reported by the Document Reader engine"""

    OK = "OK"
    WARN = "WARN"
    ERROR = "ERROR"


class VerificationStatus(str, Enum):
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CanonicalDocumentRecord:
    """
    Typed view of one Document Reader response.

    Absent fields are None. The portrait holds raw image bytes, taken from
    the visual scan when available and from the chip otherwise.
    """

    document_type: str
    overall_engine_status: EngineStatus
    document_number: Optional[str] = None
    full_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    date_of_expiry: Optional[str] = None
    portrait_image: Optional[bytes] = field(default=None, repr=False)

    @property
    def has_portrait(self) -> bool:
        return bool(self.portrait_image)

    def extracted_fields(self) -> Dict[str, Optional[str]]:
        """Text fields returned to the caller (no image data)"""
        return {
            "document_type": self.document_type,
            "document_number": self.document_number,
            "full_name": self.full_name,
            "date_of_birth": self.date_of_birth,
            "date_of_expiry": self.date_of_expiry,
        }


@dataclass(frozen=True)
class ValidationOutcome:
    errors: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class FaceMatchOutcome:
    similarity: float
    is_match: bool


@dataclass(frozen=True)
class VerificationReport:
    status: VerificationStatus
    document_check: ValidationOutcome
    engine_status: EngineStatus
    extracted: Dict[str, Optional[str]]
    reasons: Tuple[str, ...] = ()
    face_check: Optional[FaceMatchOutcome] = None
    face_check_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is VerificationStatus.VERIFIED

    def to_dict(self) -> Dict[str, Any]:
        face = self.face_check
        return {
            "success": self.success,
            "status": self.status.value,
            "reasons": list(self.reasons),
            "checks": {
                "face_match": {
                    "passed": bool(face and face.is_match),
                    "similarity": face.similarity if face else None,
                    "error": self.face_check_error,
                },
                "document_validation": {
                    "passed": self.document_check.is_valid,
                    "engine_status": self.engine_status.value,
                    "errors": list(self.document_check.errors),
                },
            },
            "extracted": dict(self.extracted),
        }
