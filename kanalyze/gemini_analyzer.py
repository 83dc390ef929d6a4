"""
Gemini Forensic Analyzer

Sends one uploaded image plus the forensic instruction template to Google's
Gemini API and turns the JSON reply into a validated AnalysisResponse.

The forensic judgement itself (verdict, probabilities, signals, heatmap) is
entirely the model's; this module only marshals the request and checks the
shape of the answer.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from . import config
from .models import AnalysisResponse
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .upload_capture import CapturedUpload

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base class for every way an analysis can fail."""


class ConfigurationError(AnalysisError):
    """No API key configured. Raised before any request is sent."""


class TransportError(AnalysisError):
    """The Gemini call itself failed (network, quota, service rejection)."""


class ContractError(AnalysisError):
    """Gemini answered, but not with a document matching the analysis schema."""


class GeminiAnalyzer:
    """Runs forensic analyses through the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = config.GEMINI_MODEL,
        temperature: float = config.GEMINI_TEMPERATURE,
        client=None
    ):
        """
        Args:
            api_key: Google Generative AI API key; may be None, in which case
                every analyze() call fails with ConfigurationError
            model_name: Gemini model to call
            temperature: Sampling temperature, kept low for consistent verdicts
            client: Pre-built genai.Client (mainly for tests)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Gemini client initialized for model {self.model_name}")
        return self._client

    async def analyze(self, upload: CapturedUpload) -> AnalysisResponse:
        """
        Analyze one image.

        Args:
            upload: The captured image file

        Returns:
            Validated AnalysisResponse

        Raises:
            ConfigurationError: If no API key is configured
            TransportError: If the Gemini call fails
            ContractError: If the reply is empty, not JSON, or off-schema
        """
        if not self.api_key:
            raise ConfigurationError("Gemini API key is missing (set GEMINI_API_KEY)")

        client = self._get_client()
        contents = [
            types.Part.from_bytes(data=upload.data, mime_type=upload.media_type),
            build_user_prompt(upload.name, upload.size_mb, upload.media_type),
        ]
        generation_config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            response_mime_type="application/json",
            temperature=self.temperature,
        )

        logger.info(f"Sending '{upload.name}' ({upload.size_mb:.2f}MB, {upload.media_type}) to {self.model_name}")
        started = time.monotonic()
        try:
            response = await client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=generation_config,
            )
        except Exception as e:
            raise TransportError(f"Gemini API call failed: {str(e)}") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        result = self._parse_response(getattr(response, "text", None))

        logger.info(f"Analysis {result.analysis_id} complete in {elapsed_ms:.0f}ms: "
                    f"{result.detection.verdict} (AI {result.detection.ai_probability}%)")
        return result

    def _parse_response(self, response_text: Optional[str]) -> AnalysisResponse:
        """
        Parse and validate the raw JSON reply.

        Fills in analysis_id (millisecond timestamp) and timestamp (ISO-8601)
        when the model leaves them out.
        """
        if not response_text:
            raise ContractError("No response text from Gemini")

        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise ContractError(f"Gemini response is not valid JSON: {str(e)}") from e

        if not isinstance(data, dict):
            raise ContractError(f"Expected a JSON object, got {type(data).__name__}")

        if data.get("error"):
            raise ContractError(f"Gemini reported an error: {data.get('message') or 'no message'}")

        if not data.get("analysis_id"):
            data["analysis_id"] = str(int(time.time() * 1000))
        if not data.get("timestamp"):
            data["timestamp"] = datetime.now(timezone.utc).isoformat()
        # Some replies number their ids
        data["analysis_id"] = str(data["analysis_id"])
        data["timestamp"] = str(data["timestamp"])

        try:
            return AnalysisResponse.model_validate(data)
        except ValidationError as e:
            raise ContractError(
                f"Gemini response does not match the analysis schema ({e.error_count()} errors): {str(e)}"
            ) from e
