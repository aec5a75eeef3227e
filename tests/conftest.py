import base64
import io
import json
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from PIL import Image

from config import Settings
from verification.models import FaceMatchOutcome

FIXED_TODAY = date(2024, 1, 1)

PORTRAIT_BYTES = b"visual-portrait-bytes"
RFID_PORTRAIT_BYTES = b"rfid-portrait-bytes"


def make_image_bytes(fmt: str = "PNG", size=(32, 32), color=(200, 150, 100)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, fmt)
    return buffer.getvalue()


def build_document_response(document_name: Optional[str] = "PASSPORT",
                            number: Optional[str] = "P123",
                            name: Optional[str] = "DOE JOHN",
                            dob: Optional[str] = "1990-05-01",
                            expiry: Optional[str] = "2099-01-01",
                            overall_status: Optional[int] = 1,
                            portrait_visual: Optional[bytes] = PORTRAIT_BYTES,
                            portrait_rfid: Optional[bytes] = None) -> Dict[str, Any]:
    """Document Reader style response; None leaves the corresponding part out"""
    containers: List[Dict[str, Any]] = []

    if document_name is not None:
        containers.append({"result_type": 9, "OneCandidate": {"DocumentName": document_name}})

    text_fields = []
    for field_type, value in ((2, number), (25, name), (5, dob), (3, expiry)):
        if value is not None:
            text_fields.append({"fieldType": field_type, "value": value, "valueList": []})
    containers.append({"result_type": 36, "Text": {"fieldList": text_fields}})

    portrait_values = []
    if portrait_visual is not None:
        portrait_values.append({"source": "VISUAL", "value": base64.b64encode(portrait_visual).decode()})
    if portrait_rfid is not None:
        portrait_values.append({"source": "RFID", "value": base64.b64encode(portrait_rfid).decode()})
    if portrait_values:
        containers.append({
            "result_type": 37,
            "Images": {"fieldList": [{"fieldType": 201, "fieldName": "Portrait", "valueList": portrait_values}]},
        })

    if overall_status is not None:
        containers.append({"result_type": 33, "Status": {"overallStatus": overall_status}})

    return {"ContainerList": {"Count": len(containers), "List": containers}}


class FakeDocumentReader:
    def __init__(self, response: Dict[str, Any]):
        self.response = response
        self.calls: List[bytes] = []

    def process(self, image: bytes) -> Dict[str, Any]:
        self.calls.append(image)
        return self.response


class FakeFaceMatcher:
    def __init__(self, outcome: Optional[FaceMatchOutcome] = None, error: Optional[Exception] = None):
        self.outcome = outcome
        self.error = error
        self.calls: List[tuple] = []

    def match(self, portrait: bytes, selfie: bytes) -> FaceMatchOutcome:
        self.calls.append((portrait, selfie))
        if self.error is not None:
            raise self.error
        return self.outcome


class FakeAdapter(requests.adapters.BaseAdapter):
    """Transport adapter answering requests from a handler function"""

    def __init__(self, handler: Callable[[requests.PreparedRequest], Any]):
        super().__init__()
        self.handler = handler
        self.requests: List[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        status, body = self.handler(request)
        response = requests.Response()
        response.status_code = status
        response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


def make_session(handler) -> requests.Session:
    session = requests.Session()
    adapter = FakeAdapter(handler)
    session.mount("http://", adapter)
    session.adapter = adapter
    return session


@pytest.fixture
def settings() -> Settings:
    return Settings(DOC_READER_URL="http://doc.test", FACE_SDK_URL="http://face.test")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TODAY


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def selfie_bytes() -> bytes:
    return make_image_bytes("JPEG", color=(10, 20, 30))
