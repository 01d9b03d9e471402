"""
Application configuration using Pydantic Settings
"""

import os

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application Settings
    app_name: str = "Oral History Caption & Entity Core"
    app_version: str = "1.0.0"

    # Logging Settings
    log_level: str = "INFO"
    log_format: str = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    log_file: str = ""  # empty = console only
    log_file_max_bytes: int = 10 * 1024 * 1024
    log_file_backup_count: int = 3

    # Alignment Formatting Settings
    # Trailing runs of unaligned words longer than this are cut from the transcript
    max_unaligned_trailing_words_allowed: int = 10

    # Captioning Settings (durations in ms, lengths in characters)
    caption_speaker1_to_speaker2_char_ratio: float = 1.5
    caption_max_cue_length: int = 80
    caption_target_length: int = 60
    caption_min_cue_duration: int = 1500
    caption_max_cue_duration: int = 7000
    caption_target_duration: int = 5000
    caption_max_cue_line_count: int = 2
    caption_vtt_note: str = "Generated from forced alignment of the interview transcript."

    # Named Entity Reference Data
    entity_data_path: str = "data/entities"
    entity_places_file: str = "USGS_Places_Table.txt"
    entity_city_hints_file: str = "DefaultStatesForSomeLocations.txt"
    entity_corporate_names_file: str = "CorporateNameLookup.txt"
    entity_corporate_synonyms_file: str = "AlternateCorporateNames.txt"
    entity_countries_file: str = "CountryNameListWithCodes.txt"
    entity_world_cities_file: str = "WorldCitiesWithCodes.txt"
    entity_country_hints_file: str = "DefaultCountriesForSomeLocations.txt"

    # Gentle Settings
    gentle_request_timeout: int = 600
    gentle_max_retries: int = 2
    gentle_retry_delay: float = 2.0

    # Pipeline Step Defaults - AlignTranscriptStep
    align_step_retries: int = 1
    align_step_retry_backoff: float = 1.0

    @field_validator(
        "caption_max_cue_length",
        "caption_target_length",
        "caption_min_cue_duration",
        "caption_max_cue_duration",
        "caption_target_duration",
        "caption_max_cue_line_count",
    )
    @classmethod
    def must_be_positive(cls, v):
        """Caption limits must be strictly positive."""
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("caption_speaker1_to_speaker2_char_ratio")
    @classmethod
    def ratio_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("speaker char ratio must be greater than zero")
        return v

    @field_validator("max_unaligned_trailing_words_allowed")
    @classmethod
    def trailing_words_not_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @property
    def gentle_url(self) -> str:
        """Get Gentle URL"""

        # Environment variable wins
        if os.getenv("GENTLE_URL"):
            return os.getenv("GENTLE_URL")
        # Running inside docker compose
        if os.getenv("DOCKER") == "1" or os.getenv("GENTLE_DOCKER") == "true":
            return "http://gentle:8765/transcriptions"
        return "http://localhost:8765/transcriptions"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()
