"""
Runtime settings read from the environment (and a local .env file).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-3-pro-image-preview"


class Settings(BaseModel):
    """Configuration for the Gemini service and the workflow."""
    api_key: Optional[str] = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    image_size: str = "2K"
    aspect_ratio: str = "9:16"
    concept_count: int = 3
    output_dir: Path = Path("outputs")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        GEMINI_API_KEY is preferred; GOOGLE_API_KEY is accepted as a fallback.
        """
        load_dotenv()

        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            text_model=os.getenv("DESIGN_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            image_model=os.getenv("DESIGN_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            image_size=os.getenv("DESIGN_IMAGE_SIZE", "2K"),
            aspect_ratio=os.getenv("DESIGN_ASPECT_RATIO", "9:16"),
            concept_count=int(os.getenv("DESIGN_CONCEPT_COUNT", "3")),
            output_dir=Path(os.getenv("DESIGN_OUTPUT_DIR", "outputs")),
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
