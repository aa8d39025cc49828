"""Language-model text generation over notes."""

from notevault.generation.client import GenerationError, TextGenerator, build_model

__all__ = ["GenerationError", "TextGenerator", "build_model"]
