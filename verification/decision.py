import logging
from typing import Dict, List, Optional

from .models import (
    CanonicalDocumentRecord,
    FaceMatchOutcome,
    ValidationOutcome,
    VerificationReport,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

PORTRAIT_NOT_FOUND = "portrait not found in document"
FACE_MISMATCH = "face does not match document portrait (similarity {similarity:.2f}%)"
ALL_PASSED = "all verification checks passed"


class DecisionEngine:
    """
    Makes the final verdict from the document validation outcome
    and the face match outcome.

    Both checks must pass independently for VERIFIED; a failed or
    missing check always yields REJECTED.
    """

    def __init__(self, mask_extracted_data: bool = False):
        self.mask_extracted_data = mask_extracted_data

    def mask_document_number(self, number: Optional[str]) -> Optional[str]:
        """Mask document number showing only first 2 and last 4 characters"""
        if not number:
            return None
        if len(number) > 6:
            return f"{number[:2]}XXXX{number[-4:]}"
        return "XXXX"

    def mask_name(self, name: Optional[str]) -> Optional[str]:
        """Mask name showing only first character and last name"""
        if not name:
            return None
        parts = name.strip().split()
        if len(parts) == 1:
            return f"{parts[0][0]}XXXX"
        return f"{parts[0][0]}XXXX {parts[-1]}"

    def make_decision(self,
                      record: CanonicalDocumentRecord,
                      validation: ValidationOutcome,
                      face_match: Optional[FaceMatchOutcome]) -> VerificationReport:
        """
        face_match is None when the document had no portrait and
        face matching never ran; the result is then a rejection that
        still carries every document validation error.
        """
        reasons: List[str] = list(validation.errors)

        if face_match is None:
            reasons.append(PORTRAIT_NOT_FOUND)
            logger.info("Rejected: %s", PORTRAIT_NOT_FOUND)
            return self._build_report(
                status=VerificationStatus.REJECTED,
                reasons=reasons,
                record=record,
                validation=validation,
                face_match=None,
                face_error=PORTRAIT_NOT_FOUND,
            )

        if not face_match.is_match:
            reasons.append(FACE_MISMATCH.format(similarity=face_match.similarity))

        if validation.is_valid and face_match.is_match:
            status = VerificationStatus.VERIFIED
            reasons = [ALL_PASSED]
        else:
            status = VerificationStatus.REJECTED

        logger.info(
            "Final decision: %s (document_valid=%s, face_match=%s)",
            status.value,
            validation.is_valid,
            face_match.is_match,
        )
        return self._build_report(
            status=status,
            reasons=reasons,
            record=record,
            validation=validation,
            face_match=face_match,
        )

    def _build_report(self,
                      status: VerificationStatus,
                      reasons: List[str],
                      record: CanonicalDocumentRecord,
                      validation: ValidationOutcome,
                      face_match: Optional[FaceMatchOutcome],
                      face_error: Optional[str] = None) -> VerificationReport:
        return VerificationReport(
            status=status,
            reasons=tuple(reasons),
            document_check=validation,
            engine_status=record.overall_engine_status,
            face_check=face_match,
            face_check_error=face_error,
            extracted=self._extracted_data(record),
        )

    def _extracted_data(self, record: CanonicalDocumentRecord) -> Dict[str, Optional[str]]:
        extracted = record.extracted_fields()
        if self.mask_extracted_data:
            extracted["document_number"] = self.mask_document_number(extracted["document_number"])
            extracted["full_name"] = self.mask_name(extracted["full_name"])
        return extracted
