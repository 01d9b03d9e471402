"""
Custom error types
"""

from typing import Optional


class CaptionProcessingError(Exception):
    """Base exception for caption and entity processing errors"""

    def __init__(self, message: str, error_code: "Optional[str]" = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class AlignmentIntegrityError(CaptionProcessingError):
    """Raised when a word from the alignment cannot be found in its cleaned paragraph.

    Args:
        message (str): Error message
        word (Optional[str]): The word that could not be located
        paragraph_text (Optional[str]): Cleaned paragraph text searched
    """

    def __init__(
        self,
        message: str,
        word: Optional[str] = None,
        paragraph_text: Optional[str] = None,
    ):
        super().__init__(message, "ALIGNMENT_INTEGRITY_ERROR")
        self.word = word
        self.paragraph_text = paragraph_text


class NERPolishError(CaptionProcessingError):
    """Base exception for NER output polishing errors"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message, error_code or "NER_POLISH_ERROR")


class NERDesyncError(NERPolishError):
    """Raised when a tagger token cannot be located in the transcript."""

    def __init__(self, message: str, token: Optional[str] = None, offset: int = 0):
        super().__init__(message, "NER_DESYNC_ERROR")
        self.token = token
        self.offset = offset


class NERBracketMismatchError(NERPolishError):
    """Raised when tagger output ends inside an open bracket."""

    def __init__(self, message: str, entity_text: Optional[str] = None):
        super().__init__(message, "NER_BRACKET_MISMATCH")
        self.entity_text = entity_text


class ReferenceDataError(CaptionProcessingError):
    """Raised when a reference data file is missing or unusable."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, "REFERENCE_DATA_ERROR")
        self.file_path = file_path


class AlignmentServiceError(CaptionProcessingError):
    """Raised when the forced alignment service cannot be reached or fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, "ALIGNMENT_SERVICE_ERROR")
        self.status_code = status_code


class ConfigurationError(CaptionProcessingError):
    """Exception raised when configuration is invalid"""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, "CONFIGURATION_ERROR")
        self.config_key = config_key


class PipelineError(CaptionProcessingError):
    """Exception raised when pipeline execution fails"""

    def __init__(
        self,
        message: str,
        stage_name: Optional[str] = None,
        stage_errors: Optional[list] = None,
    ):
        super().__init__(message, "PIPELINE_ERROR")
        self.stage_name = stage_name
        self.stage_errors = stage_errors or []
