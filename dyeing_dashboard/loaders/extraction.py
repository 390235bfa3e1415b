"""
Client for the AI document-extraction endpoints.

Each call is a single blocking POST of {base64Data, mimeType}; there are no
retries. Every failure surfaces as ExtractionError with a message fit for the
end user.
"""

import base64
import logging
import mimetypes
from pathlib import Path

import requests

from ..config import EXTRACTION_URL, HTTP_TIMEOUT
from ..errors import ExtractionError

logger = logging.getLogger(__name__)

FUNCTIONS_PATH = "/.netlify/functions"

GATEWAY_TIMEOUT_MESSAGE = (
    "Server timeout. The report image might be too complex or the network is "
    "slow. Please try again or use a PDF."
)

# document kind -> endpoint, body used when an error response is not JSON,
# status-only message, transport failure message
_DOCUMENTS: dict[str, dict] = {
    "production": {
        "endpoint": "extractProductionData",
        "unavailable": "Extraction service unavailable",
        "status_message": "HTTP error! status: {status}",
        "fallback": "The AI was unable to parse the production report.",
    },
    "rft": {
        "endpoint": "extractRFTData",
        "unavailable": None,
        "status_message": "Server Error ({status})",
        "fallback": "Connection to RFT service failed.",
    },
    "dyeing_program": {
        "endpoint": "extractDyeingProgram",
        "unavailable": "Dyeing Program Extraction service unavailable",
        "status_message": "HTTP error! status: {status}",
        "fallback": "The AI was unable to parse the dyeing program report.",
    },
}

RFT_STRUCTURE_MESSAGE = (
    "AI could not identify the table structure. Ensure the image is clear and "
    "includes all 14 headers."
)


def encode_document(path: str | Path) -> tuple[str, str]:
    """Read a report file and return (base64 payload, MIME type)."""
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return payload, mime_type or "application/octet-stream"


class ExtractionClient:
    """POSTs encoded documents to the extraction functions."""

    def __init__(
        self,
        base_url: str = EXTRACTION_URL,
        timeout: float = HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract_production(self, base64_data: str, mime_type: str) -> dict:
        return self._extract("production", base64_data, mime_type)

    def extract_rft(self, base64_data: str, mime_type: str) -> dict:
        data = self._extract("rft", base64_data, mime_type)
        if data.get("isSuccess") is False:
            raise ExtractionError(data.get("errorMessage") or RFT_STRUCTURE_MESSAGE)
        return data

    def extract_dyeing_program(self, base64_data: str, mime_type: str) -> dict:
        return self._extract("dyeing_program", base64_data, mime_type)

    def extract_file(self, kind: str, path: str | Path) -> dict:
        """Encode a local file and send it to the endpoint for kind."""
        payload, mime_type = encode_document(path)
        method = {
            "production": self.extract_production,
            "rft": self.extract_rft,
            "dyeing_program": self.extract_dyeing_program,
        }.get(kind)
        if method is None:
            raise ValueError(f"Unknown document kind: {kind!r}")
        logger.info("Extracting %s document %s (%s)", kind, path, mime_type)
        return method(payload, mime_type)

    def _extract(self, kind: str, base64_data: str, mime_type: str) -> dict:
        document = _DOCUMENTS[kind]
        url = f"{self.base_url}{FUNCTIONS_PATH}/{document['endpoint']}"
        try:
            response = self.session.post(
                url,
                json={"base64Data": base64_data, "mimeType": mime_type},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s extraction request failed: %s", kind, exc)
            raise ExtractionError(document["fallback"]) from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            if response.status_code in (502, 504):
                raise ExtractionError(GATEWAY_TIMEOUT_MESSAGE)
            body = data if isinstance(data, dict) else {"error": document["unavailable"]}
            message = (
                body.get("errorMessage")
                or body.get("error")
                or document["status_message"].format(status=response.status_code)
            )
            logger.error("%s extraction returned %d: %s", kind, response.status_code, message)
            raise ExtractionError(message)

        if not isinstance(data, dict):
            raise ExtractionError(document["fallback"])
        return data
