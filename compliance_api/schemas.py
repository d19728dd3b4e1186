from typing import Literal

from pydantic import BaseModel, Field

DocumentRole = Literal["rfq", "proposal"]


class UploadedDocument(BaseModel):
    role: DocumentRole
    filename: str = ""
    content_type: str = "application/octet-stream"
    data: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


class ContentBlock(BaseModel):
    mime_type: str
    data: str = Field(repr=False)

    def to_part(self) -> dict:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


class ComplianceSuccessResponse(BaseModel):
    success: Literal[True] = True
    result: str


class ComplianceErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
