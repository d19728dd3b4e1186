import asyncio
from typing import Any

import httpx

from compliance_api.config import settings
from compliance_api.errors import RemoteServiceError
from compliance_api.schemas import ContentBlock

SYSTEM_INSTRUCTION = """You are a strict compliance checker. Your task is to analyze the provided Request for Quote (RFQ) and the corresponding Proposal document.

**INSTRUCTIONS:**
1.  **Compliance Score (0-100):** Assign a single numerical score based on how well the Proposal meets ALL requirements in the RFQ.
2.  **Compliance Summary:** List all requirements from the RFQ and explicitly state whether the Proposal is COMPLIANT, PARTIALLY COMPLIANT, or NON-COMPLIANT for each.
3.  **Actionable Improvements:** For any non-compliant or partially compliant areas, provide a concise, actionable instruction for the proposal team to fix it.

**FORMATTING:** Respond using Markdown only."""

FRAMING_PROMPT = (
    "Document 1 (RFQ) is the set of rules. Document 2 (Proposal) is the response. "
    "Analyze Document 2 based on Document 1. "
    "Provide the analysis structured exactly as described in the System Instructions."
)


def build_generate_request(rfq: ContentBlock, proposal: ContentBlock) -> dict:
    return {
        "system_instruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [
            {
                "role": "user",
                "parts": [rfq.to_part(), proposal.to_part(), {"text": FRAMING_PROMPT}],
            }
        ],
    }


class GeminiClient:
    """Thin async wrapper around the Gemini ``generateContent`` REST call.

    One instance is built at startup and shared by every request; it owns a
    single ``httpx.AsyncClient`` so connections are pooled across checks.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    @classmethod
    def from_settings(cls) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout_s=settings.gemini_timeout_s,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def _post_json(self, url: str, headers: dict[str, str], body: dict) -> Any:
        response = await self._client.post(url, headers=headers, json=body)
        response.raise_for_status()
        return response.json()

    async def generate_compliance_report(self, rfq: ContentBlock, proposal: ContentBlock) -> str:
        if not self.model:
            raise RemoteServiceError("GEMINI_MODEL is not configured")
        if not self.api_key:
            raise RemoteServiceError("GEMINI_API_KEY is not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        body = build_generate_request(rfq, proposal)

        try:
            data = await asyncio.wait_for(self._post_json(url, headers, body), timeout=self.timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RemoteServiceError(
                f"gemini request timed out after {self.timeout_s}s: {exc!r}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RemoteServiceError(
                f"gemini returned HTTP {exc.response.status_code}: {exc.response.text[:500]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteServiceError(f"gemini request failed: {exc!r}") from exc
        except ValueError as exc:
            raise RemoteServiceError("gemini response is not valid json") from exc

        text = _extract_text(data)
        if not text:
            raise RemoteServiceError(f"gemini response carried no text: {_describe_empty(data)}")
        return text


def _extract_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts).strip()


def _describe_empty(data: Any) -> str:
    if not isinstance(data, dict):
        return f"unexpected payload type {type(data).__name__}"
    feedback = data.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return f"prompt blocked ({feedback['blockReason']})"
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        return f"unexpected candidates type {type(candidates).__name__}"
    if candidates and isinstance(candidates[0], dict) and candidates[0].get("finishReason"):
        return f"finish reason {candidates[0]['finishReason']}"
    return "no candidates"
