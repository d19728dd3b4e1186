import base64

from compliance_api.errors import ContentEncodingError
from compliance_api.schemas import ContentBlock, UploadedDocument


def format_file_for_model(document: UploadedDocument) -> ContentBlock:
    """Turn an uploaded document into an inline content block for the model."""
    encoded = base64.b64encode(document.data).decode("ascii")
    if document.data and not encoded:
        raise ContentEncodingError(f"{document.role} encoded to an empty payload ({document.size} bytes)")
    return ContentBlock(mime_type=document.content_type, data=encoded)
