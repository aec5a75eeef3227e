"""
Maps the loosely-shaped Document Reader response onto CanonicalDocumentRecord.

All "field may be missing" handling lives here: an absent container, field
or value becomes None and never raises.
"""

import base64
import binascii
import logging
from typing import Any, Dict, Iterator, List, Optional

from config import UNKNOWN_DOCUMENT_TYPE
from .models import CanonicalDocumentRecord, EngineStatus

logger = logging.getLogger(__name__)

# Text field types
DOCUMENT_NUMBER = 2
DATE_OF_EXPIRY = 3
DATE_OF_BIRTH = 5
SURNAME_AND_GIVEN_NAMES = 25

# Graphic field types
PORTRAIT = 201

# Portrait sources, in order of preference
SOURCE_VISUAL = "VISUAL"
SOURCE_RFID = "RFID"

# Engine check results
_STATUS_MAP = {
    0: EngineStatus.ERROR,
    1: EngineStatus.OK,
    2: EngineStatus.WARN,  # check was not performed
}


def _containers(raw: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    container_list = raw.get("ContainerList")
    if not isinstance(container_list, dict):
        return
    for container in container_list.get("List") or []:
        if isinstance(container, dict):
            yield container


def _find_section(raw: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    """Return the first container section stored under `key`"""
    for container in _containers(raw):
        section = container.get(key)
        if isinstance(section, dict):
            return section
    return None


def _field_list(section: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not section:
        return []
    return [f for f in section.get("fieldList") or [] if isinstance(f, dict)]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def get_text_field(raw: Dict[str, Any], field_type: int) -> Optional[str]:
    """Value of a text field, falling back to the first non-empty per-source value"""
    for field in _field_list(_find_section(raw, "Text")):
        if field.get("fieldType") != field_type:
            continue
        value = _clean(field.get("value"))
        if value:
            return value
        for item in field.get("valueList") or []:
            if isinstance(item, dict):
                value = _clean(item.get("value"))
                if value:
                    return value
    return None


def get_graphic_sources(raw: Dict[str, Any], field_type: int) -> Dict[str, bytes]:
    """Decoded image bytes of a graphic field, keyed by source"""
    sources: Dict[str, bytes] = {}
    for field in _field_list(_find_section(raw, "Images")):
        if field.get("fieldType") != field_type:
            continue
        for item in field.get("valueList") or []:
            if not isinstance(item, dict):
                continue
            source = str(item.get("source") or "").upper()
            encoded = item.get("value")
            if not source or source in sources or not encoded:
                continue
            try:
                decoded = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError, TypeError):
                logger.warning("Skipping undecodable %s image for graphic field %s", source, field_type)
                continue
            if decoded:
                sources[source] = decoded
    return sources


def get_portrait(raw: Dict[str, Any]) -> Optional[bytes]:
    sources = get_graphic_sources(raw, PORTRAIT)
    return sources.get(SOURCE_VISUAL) or sources.get(SOURCE_RFID)


def get_document_type(raw: Dict[str, Any]) -> str:
    candidate = _find_section(raw, "OneCandidate")
    name = _clean(candidate.get("DocumentName")) if candidate else None
    return name or UNKNOWN_DOCUMENT_TYPE


def get_overall_status(raw: Dict[str, Any]) -> EngineStatus:
    status = _find_section(raw, "Status")
    value = status.get("overallStatus") if status else None
    if not isinstance(value, int) or value not in _STATUS_MAP:
        logger.warning("Document Reader returned no usable overall status (%r), treating as WARN", value)
        return EngineStatus.WARN
    return _STATUS_MAP[value]


def normalize_document_response(raw: Dict[str, Any]) -> CanonicalDocumentRecord:
    """Build the canonical record for one Document Reader response"""
    record = CanonicalDocumentRecord(
        document_type=get_document_type(raw),
        overall_engine_status=get_overall_status(raw),
        document_number=get_text_field(raw, DOCUMENT_NUMBER),
        full_name=get_text_field(raw, SURNAME_AND_GIVEN_NAMES),
        date_of_birth=get_text_field(raw, DATE_OF_BIRTH),
        date_of_expiry=get_text_field(raw, DATE_OF_EXPIRY),
        portrait_image=get_portrait(raw),
    )
    logger.debug(
        "Normalized document: type=%s status=%s number=%s expiry=%s portrait=%s",
        record.document_type,
        record.overall_engine_status.value,
        "present" if record.document_number else "absent",
        record.date_of_expiry,
        "present" if record.has_portrait else "absent",
    )
    return record
