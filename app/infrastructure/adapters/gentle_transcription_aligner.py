from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from app.application.interfaces import ITranscriptionAligner
from app.core.config import settings
from app.core.pyd_schemas import AlignmentResult
from utils.alignment_utils import analyze_alignment, choose_best_alignment
from utils.gentle_utils import request_alignment

logger = logging.getLogger(__name__)


class GentleTranscriptionAligner(ITranscriptionAligner):
    """Adapter wrapping the Gentle alignment service.

    Runs a default pass and, only when some words were not found in the audio,
    a conservative pass; the better of the two is returned. When ``output_dir``
    is set the chosen alignment is kept as ``words.json``.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        timeout: int | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        output_dir: Optional[str] = None,
    ) -> None:
        self.url = url or settings.gentle_url
        self.timeout = int(timeout or settings.gentle_request_timeout)
        self.max_retries = int(max_retries or settings.gentle_max_retries)
        self.retry_delay = settings.gentle_retry_delay if retry_delay is None else retry_delay
        self.output_dir = output_dir

    def _run(self, audio_path: str, transcript_text: str, conservative: bool) -> AlignmentResult:
        return request_alignment(
            audio_path,
            transcript_text,
            gentle_url=self.url,
            conservative=conservative,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            request_timeout=self.timeout,
        )

    def align(self, audio_path: str, transcript_text: str) -> AlignmentResult:
        default = self._run(audio_path, transcript_text, conservative=False)
        stats = analyze_alignment(default)
        logger.info(
            "Gentle default pass: %s unaligned words (max run %s)",
            stats.unaligned,
            stats.max_consecutive_unaligned,
        )

        if stats.unaligned == 0:
            result = default
        else:
            conservative = self._run(audio_path, transcript_text, conservative=True)
            result = choose_best_alignment(default, conservative)

        if self.output_dir:
            target = Path(self.output_dir)
            target.mkdir(parents=True, exist_ok=True)
            with open(target / "words.json", "w", encoding="utf-8") as f:
                json.dump(result.model_dump(by_alias=True), f)
        return result
