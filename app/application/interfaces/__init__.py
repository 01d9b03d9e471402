from .aligner import ITranscriptionAligner
from .alignment_formatter import IAlignmentFormatter
from .captioner import ITextCaptioner
from .ner_polisher import INERPolisher
from .entity_resolver import ILocationResolver, IOrganizationResolver
from .caption_adapters import ICaptionPipelineAdapters
from .entity_adapters import IEntityPipelineAdapters

__all__ = [
    "ITranscriptionAligner",
    "IAlignmentFormatter",
    "ITextCaptioner",
    "INERPolisher",
    "ILocationResolver",
    "IOrganizationResolver",
    "ICaptionPipelineAdapters",
    "IEntityPipelineAdapters",
]
