"""
Utilities for loading uploaded images and handling rendered mockups.
"""

import base64
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from design_genius.models import DeviceType, GeneratedMockup


class ImageLoader:
    """Loads and normalizes uploaded screenshots and logos."""

    def __init__(self, max_dimension: Optional[int] = 3072):
        """
        Initialize image loader.

        Args:
            max_dimension: Longest side allowed before downscaling (None to keep size).
        """
        self.max_dimension = max_dimension

    def load_image(self, source: Union[str, Path, bytes]) -> Image.Image:
        """
        Load an image from disk or from raw bytes.

        Args:
            source: Path to an image file or its raw bytes.

        Returns:
            PIL Image object.
        """
        if isinstance(source, (bytes, bytearray)):
            try:
                image = Image.open(BytesIO(source))
                image.load()
            except (UnidentifiedImageError, OSError) as e:
                raise ValueError(f"Not a readable image: {e}") from e
        else:
            image_path = Path(source)
            if not image_path.exists():
                raise FileNotFoundError(f"Image not found: {image_path}")
            try:
                image = Image.open(image_path)
                image.load()
            except (UnidentifiedImageError, OSError) as e:
                raise ValueError(f"Not a readable image: {image_path}") from e

        # Logos often carry transparency; keep it
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")
        return image

    def normalize(self, image: Image.Image) -> Image.Image:
        """
        Downscale oversized images, maintaining aspect ratio.

        Args:
            image: Input PIL Image.

        Returns:
            Normalized PIL Image.
        """
        if self.max_dimension and max(image.size) > self.max_dimension:
            image = image.copy()
            image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
        return image

    def to_png_bytes(self, source: Union[str, Path, bytes], normalize: bool = True) -> bytes:
        """
        Convert an uploaded image to PNG bytes ready for the API.

        Args:
            source: Path to an image file or its raw bytes.
            normalize: Whether to downscale oversized images.

        Returns:
            PNG-encoded bytes.
        """
        image = self.load_image(source)
        if normalize:
            image = self.normalize(image)

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def validate_upload(self, data: Optional[bytes], label: str = "image") -> Tuple[bool, Optional[str]]:
        """
        Validate that uploaded bytes decode as an image.

        Returns:
            Tuple of (is_valid, error_message).
        """
        if not data:
            return False, f"{label} is empty"
        try:
            self.load_image(data)
            return True, None
        except ValueError as e:
            return False, f"{label}: {e}"


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into its MIME type and decoded bytes.

    Args:
        data_uri: String such as ``data:image/png;base64,iVBOR...``.

    Returns:
        Tuple of (mime_type, raw_bytes).
    """
    if not data_uri.startswith("data:") or ";base64," not in data_uri:
        raise ValueError("Not a base64 data URI")

    header, payload = data_uri.split(",", 1)
    mime_type = header[len("data:"):].split(";")[0] or "application/octet-stream"
    return mime_type, base64.b64decode(payload)


def data_uri_to_png(data_uri: str) -> bytes:
    """Decode a data URI and make sure the result is PNG-encoded."""
    mime_type, raw = parse_data_uri(data_uri)
    if mime_type == "image/png":
        return raw

    buffer = BytesIO()
    Image.open(BytesIO(raw)).save(buffer, format="PNG")
    return buffer.getvalue()


def mockup_filename(mockup: GeneratedMockup, device_type: DeviceType) -> str:
    """Download filename for one view of a mockup."""
    slug = "".join(c if c.isalnum() else "-" for c in mockup.concept_name.lower()).strip("-")
    while "--" in slug:
        slug = slug.replace("--", "-")
    return f"{slug or mockup.id}-{DeviceType(device_type).value}.png"


class ArtifactManager:
    """Manages writing rendered mockups to disk."""

    def __init__(self, output_dir: Union[str, Path] = "outputs"):
        """
        Initialize artifact manager.

        Args:
            output_dir: Root directory for saved mockups.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def create_session_directory(self, session_id: str) -> Path:
        """
        Create output directory for a generation session.

        Args:
            session_id: Session identifier.

        Returns:
            Path to session directory.
        """
        session_dir = self.output_dir / session_id
        session_dir.mkdir(parents=True, exist_ok=True)

        (session_dir / "mockups").mkdir(exist_ok=True)
        (session_dir / "logs").mkdir(exist_ok=True)

        return session_dir

    def save_mockup_view(
        self,
        session_id: str,
        mockup: GeneratedMockup,
        device_type: DeviceType
    ) -> Optional[Path]:
        """
        Save one rendered view of a mockup as PNG.

        Returns:
            Path to saved file, or None if the view has no image.
        """
        data_uri = mockup.get_image(device_type)
        if not data_uri:
            return None

        session_dir = self.create_session_directory(session_id)
        image_path = session_dir / "mockups" / mockup_filename(mockup, device_type)
        image_path.write_bytes(data_uri_to_png(data_uri))
        return image_path

    def save_mockup(self, session_id: str, mockup: GeneratedMockup) -> dict:
        """
        Save every rendered view of a mockup.

        Returns:
            Mapping of device type value to saved path (views without an image are skipped).
        """
        saved = {}
        for device_type in [DeviceType.MOBILE, DeviceType.DESKTOP]:
            path = self.save_mockup_view(session_id, mockup, device_type)
            if path is not None:
                saved[device_type.value] = path
        return saved
