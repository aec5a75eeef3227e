import logging
from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from verification.errors import InputError, VerificationError
from verification.log_config import RequestIdMiddleware, configure_logging
from verification.run_pipeline import run_pipeline

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Identity Verification Service",
    description="Document validation and face matching against a live selfie",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# Engine clients used by /api/verify; None means built from settings per request
app.state.settings = settings
app.state.document_reader = None
app.state.face_matcher = None


# ------------------------
# Error mapping
# ------------------------
@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError):
    logger.error("Verification failed [%s]: %s", exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={"success": False, "error": exc.to_dict()},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error while processing %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {"code": "INTERNAL_ERROR", "message": "Internal processing error"},
        },
    )


# ------------------------
# Verification API
# ------------------------
@app.post("/api/verify")
def verify(
    request: Request,
    passport: Optional[UploadFile] = File(None),
    selfie: Optional[UploadFile] = File(None),
):
    """
    Verify an identity document photo against a live selfie.
    Uploads are read into memory; nothing is written to disk.
    """
    if passport is None or selfie is None:
        raise InputError("Passport and selfie files are required")

    logger.info("Processing: %s & %s", passport.filename, selfie.filename)

    report = run_pipeline(
        document_image=passport.file.read(),
        selfie_image=selfie.file.read(),
        settings=request.app.state.settings,
        document_reader=request.app.state.document_reader,
        face_matcher=request.app.state.face_matcher,
    )
    return report.to_dict()


# ------------------------
# Health Check
# ------------------------
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "identity-verification"
    }


# ------------------------
# Local Dev Entry
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
