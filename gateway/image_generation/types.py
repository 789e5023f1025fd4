"""Image generation result types."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_IMAGE_MIME_TYPE = "image/png"


@dataclass
class GeneratedImage:
    """One generated image: inline base64 data or a reference URL."""

    b64_json: Optional[str] = None
    url: Optional[str] = None
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    revised_prompt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "b64_json": self.b64_json,
            "url": self.url,
            "mime_type": self.mime_type,
            "revised_prompt": self.revised_prompt,
        }
