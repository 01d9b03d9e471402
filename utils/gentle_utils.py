"""
Utils for working with Gentle forced alignment service.
Provides functionality to call the Gentle HTTP API and parse its JSON output.
"""

import json
import os
import time
from typing import Any, Dict, Optional

import logging
import requests
from pydantic import ValidationError

from app.core.exceptions import AlignmentServiceError
from app.core.pyd_schemas import AlignmentResult

logger = logging.getLogger(__name__)


def parse_alignment(payload: Dict[str, Any]) -> AlignmentResult:
    """Validate a Gentle JSON payload into an AlignmentResult.

    Raises:
        AlignmentServiceError: If the payload does not have the Gentle shape
    """
    try:
        return AlignmentResult.model_validate(payload)
    except ValidationError as e:
        raise AlignmentServiceError(f"Malformed Gentle alignment payload: {e}") from e


def load_alignment_file(path: str) -> AlignmentResult:
    """Read a Gentle ``words.json`` file from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_alignment(json.load(f))


def request_alignment(
    audio_path: str,
    transcript_text: str,
    *,
    gentle_url: str = "http://localhost:8765/transcriptions",
    conservative: bool = False,
    max_retries: int = 2,
    retry_delay: float = 2.0,
    request_timeout: int = 600,
    session: Optional[requests.Session] = None,
) -> AlignmentResult:
    """
    Align audio with transcript using the Gentle API.

    Args:
        audio_path: Path to the audio (or media) file
        transcript_text: Transcript text to align against
        gentle_url: Gentle API endpoint URL
        conservative: Ask Gentle for its conservative alignment settings
        max_retries: Maximum number of attempts
        retry_delay: Delay between attempts in seconds
        request_timeout: Timeout for each individual request in seconds
        session: Optional requests session (a new one is created per attempt otherwise)

    Returns:
        AlignmentResult: Parsed Gentle response

    Raises:
        AlignmentServiceError: If alignment fails after all attempts
    """
    if not audio_path or not os.path.exists(audio_path):
        raise AlignmentServiceError(f"Audio file not found: {audio_path}")

    params = {"async": "false"}
    if conservative:
        params["conservative"] = "true"

    last_error = None
    for attempt in range(1, max_retries + 1):
        own_session = session is None
        sess = session or requests.Session()
        try:
            sess.headers.update(
                {"User-Agent": "OralHistoryCaptions/1.0", "Accept": "application/json"}
            )
            logger.info(
                "Sending request to Gentle API (attempt %s/%s, conservative=%s)",
                attempt,
                max_retries,
                conservative,
            )
            with open(audio_path, "rb") as audio_file:
                files = {
                    "audio": (os.path.basename(audio_path), audio_file),
                    "transcript": ("transcript.txt", transcript_text or ""),
                }
                response = sess.post(
                    gentle_url, params=params, files=files, timeout=request_timeout
                )
            logger.info("Gentle API response status: %s", response.status_code)
            response.raise_for_status()
            return parse_alignment(response.json())

        except requests.exceptions.Timeout as e:
            last_error = f"Request timed out after {request_timeout}s"
            logger.error("Gentle API timeout: %s", e)

        except requests.exceptions.RequestException as e:
            last_error = f"Request failed: {e}"
            logger.error("Gentle API request failed: %s", e)

        except json.JSONDecodeError as e:
            last_error = f"Invalid JSON response: {e}"
            logger.error("JSON decode error: %s", e)

        finally:
            if own_session:
                sess.close()

        if attempt < max_retries:
            time.sleep(retry_delay)

    raise AlignmentServiceError(
        f"Failed to align audio after {max_retries} attempts. Last error: {last_error}"
    )
