import contextlib
import logging

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compliance_api.config import settings
from compliance_api.errors import INTERNAL_ERROR_MESSAGE, MISSING_DOCUMENTS_MESSAGE, UploadValidationError
from compliance_api.llm import GeminiClient
from compliance_api.observability import (
    OUTCOME_FAILED,
    OUTCOME_REJECTED,
    OUTCOME_REPORTED,
    RequestLoggingMiddleware,
    configure_logging,
    record_check_outcome,
)
from compliance_api.schemas import ComplianceErrorResponse, ComplianceSuccessResponse
from compliance_api.services.compliance_service import run_compliance_check

configure_logging()
logger = logging.getLogger("compliance.api")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.gemini_client = GeminiClient.from_settings()
    if not settings.gemini_model:
        logger.warning("GEMINI_MODEL is not set; compliance checks will fail until it is configured")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; compliance checks will fail until it is configured")
    yield
    await app.state.gemini_client.aclose()


app = FastAPI(title="Compliance Check API", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.allowed_origin],
    allow_methods=["POST"],
)


def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini_client


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ComplianceErrorResponse(error=message).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def form_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # A field sent as plain text instead of a file is as good as missing.
    logger.info("form_validation_failed errors=%s", exc.errors())
    record_check_outcome(request, OUTCOME_REJECTED)
    return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_DOCUMENTS_MESSAGE)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": settings.gemini_model}


@app.post(
    "/api/compliance-check",
    response_model=ComplianceSuccessResponse,
    responses={400: {"model": ComplianceErrorResponse}, 500: {"model": ComplianceErrorResponse}},
)
async def compliance_check(
    request: Request,
    rfq: list[UploadFile] | None = File(default=None),
    proposal: list[UploadFile] | None = File(default=None),
    client: GeminiClient = Depends(get_gemini_client),
):
    try:
        report = await run_compliance_check(rfq, proposal, client)
    except UploadValidationError as exc:
        record_check_outcome(request, OUTCOME_REJECTED)
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception as exc:  # noqa: BLE001
        record_check_outcome(request, OUTCOME_FAILED)
        logger.exception(
            "compliance_check_failed error=%r",
            exc,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "model": client.model,
            },
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
    record_check_outcome(request, OUTCOME_REPORTED)
    return report


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
