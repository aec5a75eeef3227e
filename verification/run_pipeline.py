import logging
from datetime import date
from typing import Callable, Optional

from config import Settings
from .checks import DocumentChecks
from .decision import DecisionEngine
from .errors import ExtractionIncompleteError
from .extractor import DocumentReaderClient
from .face_match import FaceMatcher
from .images import prepare_image
from .models import VerificationReport
from .normalizer import normalize_document_response

logger = logging.getLogger(__name__)


def run_pipeline(document_image: bytes,
                 selfie_image: bytes,
                 settings: Settings,
                 document_reader: Optional[DocumentReaderClient] = None,
                 face_matcher: Optional[FaceMatcher] = None,
                 clock: Callable[[], date] = date.today) -> VerificationReport:
    """
    Verify a document photo against a live selfie.

    Args:
        document_image: raw bytes of the identity document photo
        selfie_image: raw bytes of the live selfie
        settings: process configuration, built once at startup
        document_reader / face_matcher: engine clients; built from settings when omitted
        clock: source of "today" for the expiry rule

    Returns:
        VerificationReport with a VERIFIED or REJECTED verdict

    Raises:
        InputError, ExtractionIncompleteError, EngineCommunicationError,
        NoComparableFacesError
    """

    # Step 1: Reject unusable uploads before contacting any engine
    document_image = prepare_image(document_image, "document")
    selfie_image = prepare_image(selfie_image, "selfie")

    # Initialize components
    document_reader = document_reader or DocumentReaderClient(
        base_url=settings.DOC_READER_URL,
        timeout=settings.ENGINE_TIMEOUT_SECONDS,
        verify_ssl=settings.VERIFY_SSL,
    )
    face_matcher = face_matcher or FaceMatcher(
        base_url=settings.FACE_SDK_URL,
        timeout=settings.ENGINE_TIMEOUT_SECONDS,
        verify_ssl=settings.VERIFY_SSL,
    )
    checker = DocumentChecks(clock=clock)
    decision_engine = DecisionEngine(mask_extracted_data=settings.MASK_EXTRACTED_DATA)

    # Step 2: Document extraction
    logger.info("Sending document to Document Reader")
    raw_response = document_reader.process(document_image)
    record = normalize_document_response(raw_response)

    # Step 3: Document validation
    validation = checker.validate(record)
    logger.info(
        "Document type=%s engine_status=%s validation_errors=%d",
        record.document_type,
        record.overall_engine_status.value,
        len(validation.errors),
    )

    # Step 4: Face matching needs the portrait extracted in step 2
    if not record.has_portrait:
        logger.error("No portrait found in document")
        if settings.MISSING_PORTRAIT_POLICY == "fail":
            raise ExtractionIncompleteError("portrait not found in document")
        return decision_engine.make_decision(record, validation, face_match=None)

    logger.info("Matching faces")
    face_result = face_matcher.match(record.portrait_image, selfie_image)

    # Step 5: Final decision
    return decision_engine.make_decision(record, validation, face_result)
