"""TOC sources: heuristic text classification and AI-assisted extraction."""

from .heuristic import detect_toc_structure
from .ai_config import AiExtractionConfig
from .ai_extractor import AiTocExtractor, parse_toc_response

__all__ = ["detect_toc_structure", "AiExtractionConfig", "AiTocExtractor", "parse_toc_response"]
