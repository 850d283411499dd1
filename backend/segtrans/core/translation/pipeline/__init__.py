"""Translation pipeline components.

This module provides the core pipeline components for chunk translation:
- chunker: Fixed-size segment chunking and paragraph smart splitting
- PromptEngine: Builds prompts per processing mode
- ModelClient / LiteLLMGateway: Completion capability behind one contract
- response_parser: Lenient two-stage JSON parsing of model output
- OutputProcessor: Maps parsed output onto chunks, builds fallbacks
- TranslationPipeline: Runs one chunk end to end
"""

from .chunker import chunk_paragraph_text, split_for_paragraph, split_segments
from .llm_gateway import GatewayFactory, LiteLLMGateway, ModelClient
from .output_processor import (
    MISSING_TRANSLATION,
    MODEL_CALL_FAILURE,
    PARSE_FAILURE,
    OutputProcessor,
)
from .pipeline import PipelineConfig, TranslationPipeline
from .prompt_engine import PromptEngine
from .response_parser import parse_model_output

__all__ = [
    "chunk_paragraph_text",
    "split_for_paragraph",
    "split_segments",
    "GatewayFactory",
    "LiteLLMGateway",
    "ModelClient",
    "MISSING_TRANSLATION",
    "MODEL_CALL_FAILURE",
    "PARSE_FAILURE",
    "OutputProcessor",
    "PipelineConfig",
    "TranslationPipeline",
    "PromptEngine",
    "parse_model_output",
]
