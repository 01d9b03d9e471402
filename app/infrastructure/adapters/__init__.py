from .alignment_formatter import AlignmentFormatter
from .text_captioner import TextCaptioner, CaptioningOptions
from .gentle_transcription_aligner import GentleTranscriptionAligner
from .stanford_ner_polisher import StanfordNERPolisher
from .domestic_location_resolver import DomesticLocationResolver
from .international_location_resolver import InternationalLocationResolver
from .organization_resolver import OrganizationResolver
from .reference_data_loader import ReferenceDataLoader

__all__ = [
    "AlignmentFormatter",
    "TextCaptioner",
    "CaptioningOptions",
    "GentleTranscriptionAligner",
    "StanfordNERPolisher",
    "DomesticLocationResolver",
    "InternationalLocationResolver",
    "OrganizationResolver",
    "ReferenceDataLoader",
]
