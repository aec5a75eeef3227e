import base64
import logging
import math
from typing import Any, Dict, List, Optional

import requests

from config import FACE_MATCH_THRESHOLD
from .errors import EngineCommunicationError, InputError, NoComparableFacesError
from .models import FaceMatchOutcome

logger = logging.getLogger(__name__)

ENGINE_NAME = "face-sdk"

# Image source tags understood by the Face SDK match API
IMAGE_SOURCE_DOCUMENT_PRINTED = 1
IMAGE_SOURCE_LIVE = 3


def similarity_to_percentage(value: Any) -> float:
    """Engine similarity in [0, 1] as an unrounded percentage"""
    similarity = float(value)
    if not math.isfinite(similarity) or not 0.0 <= similarity <= 1.0:
        raise ValueError(f"similarity {value!r} outside [0, 1]")
    return similarity * 100


def is_face_match(similarity: float) -> bool:
    return similarity > FACE_MATCH_THRESHOLD


class FaceMatcher:
    """
    Compares the document portrait against the live selfie
    using the Face SDK matching engine
    """

    def __init__(self,
                 base_url: str,
                 timeout: float,
                 verify_ssl: bool = True,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session

    def build_request(self, portrait: bytes, selfie: bytes) -> Dict[str, Any]:
        return {
            "images": [
                {
                    "type": IMAGE_SOURCE_DOCUMENT_PRINTED,
                    "data": base64.b64encode(portrait).decode("ascii"),
                    "index": 1,
                },
                {
                    "type": IMAGE_SOURCE_LIVE,
                    "data": base64.b64encode(selfie).decode("ascii"),
                    "index": 2,
                },
            ]
        }

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/api/match"
        session = self.session or requests.Session()

        try:
            response = session.post(url, json=payload, timeout=self.timeout, verify=self.verify_ssl)
        except requests.Timeout as e:
            raise EngineCommunicationError(ENGINE_NAME, f"request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise EngineCommunicationError(ENGINE_NAME, f"request failed: {e}") from e
        finally:
            if self.session is None:
                session.close()

        if not response.ok:
            raise EngineCommunicationError(
                ENGINE_NAME,
                f"unexpected HTTP status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EngineCommunicationError(ENGINE_NAME, "response is not valid JSON") from e

        if not isinstance(data, dict):
            raise EngineCommunicationError(ENGINE_NAME, "response is not a JSON object")
        return data

    def match(self, portrait: bytes, selfie: bytes) -> FaceMatchOutcome:
        """
        Match the two faces and threshold the similarity.

        Raises:
            InputError: either image is empty (no request is made)
            NoComparableFacesError: the engine returned no match results
            EngineCommunicationError: transport failure or malformed response
        """
        if not portrait:
            raise InputError("document portrait image is empty")
        if not selfie:
            raise InputError("selfie image is empty")

        data = self._post(self.build_request(portrait, selfie))

        results: Optional[List[Any]] = data.get("results") or data.get("Results")
        if not results:
            raise NoComparableFacesError("no comparable faces found")
        if not isinstance(results, list):
            raise EngineCommunicationError(ENGINE_NAME, "match results are not a list")

        first = results[0]
        raw_similarity = first.get("similarity") if isinstance(first, dict) else None
        try:
            percentage = similarity_to_percentage(raw_similarity)
        except (TypeError, ValueError) as e:
            raise EngineCommunicationError(ENGINE_NAME, f"invalid similarity value {raw_similarity!r}") from e

        # Threshold the raw score; rounding is for reporting only
        outcome = FaceMatchOutcome(similarity=round(percentage, 2), is_match=is_face_match(percentage))
        logger.info("Face similarity: %.2f%% (match=%s)", outcome.similarity, outcome.is_match)
        return outcome
