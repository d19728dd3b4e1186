MISSING_DOCUMENTS_MESSAGE = "Both RFQ and Proposal files are required."
TOO_MANY_DOCUMENTS_MESSAGE = "Only one file may be uploaded for each of RFQ and Proposal."
INTERNAL_ERROR_MESSAGE = (
    "An internal server error occurred during the compliance check. "
    "Check file formats and server logs."
)


class ComplianceCheckError(Exception):
    """Base class for failures raised while running a compliance check."""


class UploadValidationError(ComplianceCheckError):
    """The request itself is unusable; safe to report back to the caller."""

    public_message = MISSING_DOCUMENTS_MESSAGE

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)


class MissingDocumentsError(UploadValidationError):
    public_message = MISSING_DOCUMENTS_MESSAGE


class TooManyDocumentsError(UploadValidationError):
    public_message = TOO_MANY_DOCUMENTS_MESSAGE


class ContentEncodingError(ComplianceCheckError):
    pass


class RemoteServiceError(ComplianceCheckError):
    pass
