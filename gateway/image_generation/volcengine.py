"""Volcengine (ByteDance Seedream) image generation.

The Ark endpoint follows the OpenAI images request and response shape.
"""

from .openai_compatible import OpenAICompatibleImageClient


class VolcengineImageClient(OpenAICompatibleImageClient):
    """Seedream models served from Volcengine Ark."""

    vendor_label = "Volcengine"
