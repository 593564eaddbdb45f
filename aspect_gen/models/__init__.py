"""
Module: aspect_gen.models
Purpose: Remote image generation model clients
"""

from aspect_gen.models.gemini import GeminiGenerator

__all__ = ["GeminiGenerator"]
