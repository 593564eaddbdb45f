"""
Module: aspect_gen.utils
Purpose: Image codec, upload and download helpers
"""

from aspect_gen.utils.image_codec import decode, encode

__all__ = ["decode", "encode"]
