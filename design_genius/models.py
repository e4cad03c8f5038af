"""
Data models and view state for the mockup generation workflow.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class DeviceType(str, Enum):
    """Mockup view types."""
    MOBILE = "mobile"
    DESKTOP = "desktop"


class MockupStatus(str, Enum):
    """Generation status of a mockup card."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationInput(BaseModel):
    """What the user submits for a generation run."""
    url: str = ""
    company_info: str = ""
    screenshot: Optional[bytes] = None
    logo: Optional[bytes] = None


class DesignConcept(BaseModel):
    """One proposed design direction produced by the research step."""
    name: str
    description: str
    image_prompt: str = Field(alias="imagePrompt")

    model_config = {"populate_by_name": True}


class GroundingSource(BaseModel):
    """A citation returned by the research step."""
    title: str
    uri: str


class GeneratedMockup(BaseModel):
    """Mobile and desktop renders of a single concept."""
    id: str
    concept_name: str
    description: str
    mobile_image_url: Optional[str] = None
    desktop_image_url: Optional[str] = None
    status: MockupStatus = MockupStatus.PENDING
    regenerating_view: Optional[DeviceType] = None
    error: Optional[str] = None
    failed_views: List[DeviceType] = Field(default_factory=list)

    def get_image(self, device_type: DeviceType) -> Optional[str]:
        """Get the image data URI for a specific view."""
        if device_type == DeviceType.MOBILE:
            return self.mobile_image_url
        elif device_type == DeviceType.DESKTOP:
            return self.desktop_image_url
        else:
            raise ValueError(f"Unknown device type: {device_type}")

    def with_image(self, device_type: DeviceType, image_url: str) -> "GeneratedMockup":
        """Return a copy with the image for ``device_type`` replaced."""
        field_name = f"{DeviceType(device_type).value}_image_url"
        failed = [view for view in self.failed_views if view != device_type]
        return self.model_copy(update={field_name: image_url, "failed_views": failed})

    @property
    def is_busy(self) -> bool:
        return self.status == MockupStatus.GENERATING or self.regenerating_view is not None


class GenerationResult(BaseModel):
    """Outcome of a complete generation run."""
    concepts: List[DesignConcept] = Field(default_factory=list)
    sources: List[GroundingSource] = Field(default_factory=list)
    mockups: List[GeneratedMockup] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


ZOOM_STEP = 0.5
MIN_ZOOM = 0.5
MAX_ZOOM = 4.0


class ZoomPanState(BaseModel):
    """Zoom and pan state of the fullscreen mockup viewer."""
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    is_dragging: bool = False
    drag_start_x: float = 0.0
    drag_start_y: float = 0.0

    def zoom_in(self) -> float:
        self.zoom = min(self.zoom + ZOOM_STEP, MAX_ZOOM)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = max(self.zoom - ZOOM_STEP, MIN_ZOOM)
        return self.zoom

    def reset(self) -> None:
        """Back to 1x with no pan offset."""
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.is_dragging = False

    def start_drag(self, x: float, y: float) -> None:
        self.is_dragging = True
        self.drag_start_x = x - self.pan_x
        self.drag_start_y = y - self.pan_y

    def drag_to(self, x: float, y: float) -> None:
        if not self.is_dragging:
            return
        self.pan_x = x - self.drag_start_x
        self.pan_y = y - self.drag_start_y

    def end_drag(self) -> None:
        self.is_dragging = False

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the image by a fixed offset, as one short drag."""
        self.start_drag(0.0, 0.0)
        self.drag_to(dx, dy)
        self.end_drag()

    def crop_box(self, width: int, height: int) -> tuple[int, int, int, int]:
        """
        Compute the region of a ``width`` x ``height`` image that is visible.

        Zoom below 1 shows the whole image. Pan offsets are in output pixels
        and move the visible window the opposite way, like dragging the image.

        Returns:
            (left, upper, right, lower) box suitable for ``Image.crop``.
        """
        if self.zoom <= 1.0:
            return 0, 0, width, height

        view_w = width / self.zoom
        view_h = height / self.zoom
        center_x = width / 2 - self.pan_x / self.zoom
        center_y = height / 2 - self.pan_y / self.zoom

        left = min(max(center_x - view_w / 2, 0), width - view_w)
        upper = min(max(center_y - view_h / 2, 0), height - view_h)

        return (
            int(round(left)),
            int(round(upper)),
            int(round(left + view_w)),
            int(round(upper + view_h)),
        )
