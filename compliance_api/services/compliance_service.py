import logging

from fastapi import UploadFile

from compliance_api.errors import MissingDocumentsError, TooManyDocumentsError
from compliance_api.formatting import format_file_for_model
from compliance_api.llm import GeminiClient
from compliance_api.schemas import ComplianceSuccessResponse, DocumentRole, UploadedDocument

logger = logging.getLogger("compliance.check")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _single_upload(uploads: list[UploadFile] | None) -> UploadFile:
    if not uploads:
        raise MissingDocumentsError()
    if len(uploads) > 1:
        raise TooManyDocumentsError()
    return uploads[0]


async def read_documents(
    rfq_uploads: list[UploadFile] | None,
    proposal_uploads: list[UploadFile] | None,
) -> tuple[UploadedDocument, UploadedDocument]:
    """Validate the two form fields and buffer each file in memory.

    Presence is checked for both roles before anything is read, so a request
    missing either part is rejected without touching the other upload.
    """
    if not rfq_uploads or not proposal_uploads:
        raise MissingDocumentsError()

    rfq = await _buffer("rfq", _single_upload(rfq_uploads))
    proposal = await _buffer("proposal", _single_upload(proposal_uploads))
    return rfq, proposal


async def _buffer(role: DocumentRole, upload: UploadFile) -> UploadedDocument:
    data = await upload.read()
    return UploadedDocument(
        role=role,
        filename=upload.filename or "",
        content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
        data=data,
    )


async def run_compliance_check(
    rfq_uploads: list[UploadFile] | None,
    proposal_uploads: list[UploadFile] | None,
    client: GeminiClient,
) -> ComplianceSuccessResponse:
    rfq, proposal = await read_documents(rfq_uploads, proposal_uploads)

    rfq_block = format_file_for_model(rfq)
    proposal_block = format_file_for_model(proposal)
    logger.debug(
        "documents_encoded",
        extra={
            "rfq_size": rfq.size,
            "proposal_size": proposal.size,
            "rfq_encoded_length": len(rfq_block.data),
            "proposal_encoded_length": len(proposal_block.data),
        },
    )

    report = await client.generate_compliance_report(rfq_block, proposal_block)
    return ComplianceSuccessResponse(result=report)
