"""Free-text insight extraction."""

from .insight_extractor import ExtractionTrace, InsightExtractor, extract_insights
from .vocabulary import DEFAULT_VOCABULARY, Section, Vocabulary, load_vocabulary

__all__ = [
    "ExtractionTrace",
    "InsightExtractor",
    "extract_insights",
    "DEFAULT_VOCABULARY",
    "Section",
    "Vocabulary",
    "load_vocabulary",
]
