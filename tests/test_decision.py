from verification.decision import ALL_PASSED, PORTRAIT_NOT_FOUND, DecisionEngine
from verification.models import (
    CanonicalDocumentRecord,
    EngineStatus,
    FaceMatchOutcome,
    ValidationOutcome,
    VerificationStatus,
)

RECORD = CanonicalDocumentRecord(
    document_type="PASSPORT",
    overall_engine_status=EngineStatus.OK,
    document_number="P12345678",
    full_name="John Michael Doe",
    date_of_expiry="2099-01-01",
    portrait_image=b"portrait",
)

VALID = ValidationOutcome()
INVALID = ValidationOutcome(errors=("document type not recognized",))
MATCH = FaceMatchOutcome(similarity=92.3, is_match=True)
NO_MATCH = FaceMatchOutcome(similarity=40.0, is_match=False)


def test_both_checks_pass():
    report = DecisionEngine().make_decision(RECORD, VALID, MATCH)

    assert report.success is True
    assert report.status is VerificationStatus.VERIFIED
    assert report.reasons == (ALL_PASSED,)
    assert report.face_check == MATCH


def test_document_failure_rejects_despite_face_match():
    report = DecisionEngine().make_decision(RECORD, INVALID, MATCH)

    assert report.success is False
    assert report.status is VerificationStatus.REJECTED
    assert report.reasons == INVALID.errors


def test_face_mismatch_rejects_valid_document():
    report = DecisionEngine().make_decision(RECORD, VALID, NO_MATCH)

    assert report.status is VerificationStatus.REJECTED
    assert len(report.reasons) == 1
    assert "40.00%" in report.reasons[0]


def test_missing_portrait_reports_both_checks():
    report = DecisionEngine().make_decision(RECORD, INVALID, None)

    assert report.status is VerificationStatus.REJECTED
    assert report.face_check is None
    assert report.face_check_error == PORTRAIT_NOT_FOUND
    assert report.document_check == INVALID
    assert report.reasons == INVALID.errors + (PORTRAIT_NOT_FOUND,)


def test_missing_portrait_rejects_even_valid_document():
    report = DecisionEngine().make_decision(RECORD, VALID, None)

    assert report.success is False
    assert report.document_check.is_valid is True


def test_report_to_dict():
    data = DecisionEngine().make_decision(RECORD, VALID, MATCH).to_dict()

    assert data == {
        "success": True,
        "status": "VERIFIED",
        "reasons": [ALL_PASSED],
        "checks": {
            "face_match": {"passed": True, "similarity": 92.3, "error": None},
            "document_validation": {"passed": True, "engine_status": "OK", "errors": []},
        },
        "extracted": {
            "document_type": "PASSPORT",
            "document_number": "P12345678",
            "full_name": "John Michael Doe",
            "date_of_birth": None,
            "date_of_expiry": "2099-01-01",
        },
    }


def test_missing_portrait_to_dict():
    checks = DecisionEngine().make_decision(RECORD, VALID, None).to_dict()["checks"]

    assert checks["face_match"] == {"passed": False, "similarity": None, "error": PORTRAIT_NOT_FOUND}


def test_masked_extracted_data():
    extracted = DecisionEngine(mask_extracted_data=True).make_decision(RECORD, VALID, MATCH).extracted

    assert extracted["document_number"] == "P1XXXX5678"
    assert extracted["full_name"] == "JXXXX Doe"
    assert extracted["date_of_expiry"] == "2099-01-01"


def test_masking_helpers():
    engine = DecisionEngine()

    assert engine.mask_document_number(None) is None
    assert engine.mask_document_number("P123") == "XXXX"
    assert engine.mask_name("Cher") == "CXXXX"
    assert engine.mask_name(None) is None
