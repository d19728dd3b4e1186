import base64

from compliance_api.formatting import format_file_for_model
from compliance_api.schemas import UploadedDocument


def _doc(data: bytes, content_type: str = "application/pdf") -> UploadedDocument:
    return UploadedDocument(role="rfq", filename="rfq.pdf", content_type=content_type, data=data)


def test_format_file_encodes_bytes_and_keeps_media_type() -> None:
    block = format_file_for_model(_doc(b"%PDF-1.7 rules", "application/pdf"))

    assert block.mime_type == "application/pdf"
    assert base64.b64decode(block.data) == b"%PDF-1.7 rules"
    assert block.to_part() == {"inline_data": {"mime_type": "application/pdf", "data": block.data}}


def test_encoded_length_is_positive_and_grows_with_input() -> None:
    lengths = [len(format_file_for_model(_doc(b"x" * size)).data) for size in range(1, 200)]

    assert all(length > 0 for length in lengths)
    assert lengths == sorted(lengths)
    assert lengths[-1] > lengths[0]


def test_large_binary_document_is_not_truncated() -> None:
    payload = bytes(range(256)) * 60  # ~15 KB, every byte value present
    block = format_file_for_model(_doc(payload))

    assert len(block.data) == 4 * ((len(payload) + 2) // 3)
    assert base64.b64decode(block.data) == payload
