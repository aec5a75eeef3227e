from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Document Reader engine (document-data extraction)
    DOC_READER_URL: str = "http://localhost:8080"
    # Face SDK engine (face-biometric matching)
    FACE_SDK_URL: str = "http://localhost:41101"
    # Applied to every outbound engine call; the engines themselves never time out
    ENGINE_TIMEOUT_SECONDS: float = 30.0
    VERIFY_SSL: bool = True

    LOG_LEVEL: str = "INFO"
    PORT: int = 4000

    # Mask document number and name in the returned report
    MASK_EXTRACTED_DATA: bool = False
    # "reject": missing portrait yields a REJECTED report without face matching
    # "fail": missing portrait aborts the request with EXTRACTION_INCOMPLETE
    MISSING_PORTRAIT_POLICY: Literal["reject", "fail"] = "reject"

    class Config:
        env_file = ".env"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# Faces match only when similarity is strictly above this percentage
FACE_MATCH_THRESHOLD = 75.0

# Sentinel for documents the engine could not classify
UNKNOWN_DOCUMENT_TYPE = "UNKNOWN"

# Expiry date formats the engine is known to emit, tried in order
EXPIRY_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%Y%m%d",
]
