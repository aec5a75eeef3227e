import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from config import EXPIRY_DATE_FORMATS, UNKNOWN_DOCUMENT_TYPE
from .models import CanonicalDocumentRecord, EngineStatus, ValidationOutcome

logger = logging.getLogger(__name__)

UNKNOWN_TYPE_ERROR = "document type not recognized"
ENGINE_ERROR = "engine reported critical validation failure"
EXPIRED_ERROR = "document is expired (valid until: {expiry})"
MISSING_EXPIRY_ERROR = "no expiry date found on an unrecognized document"
NO_TEXT_ERROR = "no text data extracted (image too blurry or empty)"


def parse_document_date(value: str) -> Optional[date]:
    """Parse a date as printed by the engine; None when no known format fits"""
    text = value.strip()
    for fmt in EXPIRY_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        # ISO datetimes, time of day ignored
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


class DocumentChecks:
    """
    Validation rules for a single canonical document record.
    Every rule runs; all violations are collected in a fixed order.
    """

    def __init__(self, clock: Callable[[], date] = date.today):
        self.clock = clock

    def check_document_type(self, record: CanonicalDocumentRecord) -> List[str]:
        if record.document_type == UNKNOWN_DOCUMENT_TYPE:
            return [UNKNOWN_TYPE_ERROR]
        return []

    def check_engine_status(self, record: CanonicalDocumentRecord) -> List[str]:
        if record.overall_engine_status is EngineStatus.ERROR:
            return [ENGINE_ERROR]
        return []

    def check_expiry(self, record: CanonicalDocumentRecord, today: date) -> List[str]:
        """Expired documents fail; a missing expiry only fails on unrecognized documents"""
        expiry = record.date_of_expiry
        if not expiry:
            if record.document_type == UNKNOWN_DOCUMENT_TYPE:
                return [MISSING_EXPIRY_ERROR]
            return []

        expiry_date = parse_document_date(expiry)
        if expiry_date is None:
            logger.warning("Could not parse expiry date %r, skipping expiry check", expiry)
            return []

        if expiry_date < today:
            return [EXPIRED_ERROR.format(expiry=expiry)]
        return []

    def check_text_extracted(self, record: CanonicalDocumentRecord) -> List[str]:
        if not record.document_number and not record.full_name:
            return [NO_TEXT_ERROR]
        return []

    def validate(self, record: CanonicalDocumentRecord, today: Optional[date] = None) -> ValidationOutcome:
        today = today or self.clock()

        errors: List[str] = []
        errors.extend(self.check_document_type(record))
        errors.extend(self.check_engine_status(record))
        errors.extend(self.check_expiry(record, today))
        errors.extend(self.check_text_extracted(record))

        outcome = ValidationOutcome(errors=tuple(errors))
        logger.debug(
            "Document report: type=%s engine_status=%s errors=%d decision=%s",
            record.document_type,
            record.overall_engine_status.value,
            len(errors),
            "VALID" if outcome.is_valid else "INVALID",
        )
        return outcome
