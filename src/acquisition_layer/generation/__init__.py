"""Structured content generation (LLM call + validation/repair loop)."""

from acquisition_layer.generation.generator import ContentGenerator, GenerationResult

__all__ = ["ContentGenerator", "GenerationResult"]
