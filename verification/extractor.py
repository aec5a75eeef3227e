import base64
import logging
from typing import Any, Dict, Optional

import requests

from .errors import EngineCommunicationError

logger = logging.getLogger(__name__)

ENGINE_NAME = "document-reader"

# Processing parameters understood by the Document Reader web API
SCENARIO_FULL_PROCESS = "FullProcess"
LIGHT_WHITE = 6


class DocumentReaderClient:
    """
    Sends a single document page to the Document Reader engine
    and returns its raw JSON response
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

    def build_request(self, image: bytes) -> Dict[str, Any]:
        return {
            "processParam": {
                "scenario": SCENARIO_FULL_PROCESS,
                "alreadyCropped": False,
            },
            "List": [
                {
                    "ImageData": {"image": base64.b64encode(image).decode("ascii")},
                    "light": LIGHT_WHITE,
                    "page_idx": 0,
                }
            ],
        }

    def process(self, image: bytes) -> Dict[str, Any]:
        """Run the full processing scenario on one page image"""
        url = f"{self.base_url}/api/process"
        session = self.session or requests.Session()

        try:
            response = session.post(
                url,
                json=self.build_request(image),
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
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
            payload = response.json()
        except ValueError as e:
            raise EngineCommunicationError(ENGINE_NAME, "response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise EngineCommunicationError(ENGINE_NAME, "response is not a JSON object")

        logger.info("Document Reader responded in %.2fs", response.elapsed.total_seconds())
        return payload
