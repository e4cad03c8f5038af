"""
In-memory UI state container for a design session.

The board holds what the front-end renders: the submitted input, research
sources, mockup cards, the active view, the run error and the fullscreen
viewer state. Workflow nodes push their progress into it as it happens.
"""

from typing import Callable, Dict, List, Optional

from design_genius.models import (
    DesignConcept,
    DeviceType,
    GeneratedMockup,
    GenerationInput,
    GroundingSource,
    MockupStatus,
    ZoomPanState,
)


BoardListener = Callable[[str, Optional[GeneratedMockup]], None]


class MockupBoard:
    """Session state for the mockup front-end."""

    def __init__(self):
        self.input = GenerationInput()
        self.mockups: List[GeneratedMockup] = []
        self.concepts: Dict[str, DesignConcept] = {}
        self.sources: List[GroundingSource] = []
        self.error: Optional[str] = None
        self.is_analyzing = False
        self.is_fetching_info = False
        self.view_mode = DeviceType.MOBILE
        self.fullscreen_image: Optional[str] = None
        self.zoom = ZoomPanState()
        self._listeners: List[BoardListener] = []

    def subscribe(self, listener: BoardListener):
        """Register a callback run after every change as ``listener(event, mockup)``."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: BoardListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, mockup: Optional[GeneratedMockup] = None):
        for listener in self._listeners:
            listener(event, mockup)

    # Run lifecycle

    def begin_run(self):
        """Clear results of the previous run."""
        self.error = None
        self.is_analyzing = True
        self.mockups = []
        self.concepts = {}
        self.sources = []
        self._notify("started")

    def fail_run(self, message: str):
        self.error = message
        self.is_analyzing = False
        self._notify("failed")

    def seed(self, mockups: List[GeneratedMockup], concepts: List[DesignConcept], sources: List[GroundingSource]):
        """Publish research results and the placeholder cards."""
        self.sources = list(sources)
        self.mockups = list(mockups)
        self.concepts = {mockup.id: concept for mockup, concept in zip(mockups, concepts)}
        self.is_analyzing = False
        self._notify("seeded")

    # Card updates

    def get(self, mockup_id: str) -> Optional[GeneratedMockup]:
        for mockup in self.mockups:
            if mockup.id == mockup_id:
                return mockup
        return None

    def replace(self, mockup: GeneratedMockup, event: str = "updated"):
        """Swap in a new version of a card (matched by id)."""
        self.mockups = [mockup if m.id == mockup.id else m for m in self.mockups]
        self._notify(event, mockup)

    def update(self, mockup_id: str, event: str = "updated", **changes) -> Optional[GeneratedMockup]:
        current = self.get(mockup_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self.replace(updated, event)
        return updated

    def set_image(self, mockup_id: str, device_type: DeviceType, image_url: str):
        current = self.get(mockup_id)
        if current is not None:
            self.replace(current.with_image(device_type, image_url), "image")

    # Queries

    @property
    def is_busy(self) -> bool:
        return self.is_analyzing or any(m.status == MockupStatus.GENERATING for m in self.mockups)

    def concept_for(self, mockup_id: str) -> Optional[DesignConcept]:
        """
        Concept a card was rendered from.

        Cards restored without their concept get a prompt rebuilt from the
        card's name and description.
        """
        concept = self.concepts.get(mockup_id)
        if concept is not None:
            return concept

        mockup = self.get(mockup_id)
        if mockup is None:
            return None
        return DesignConcept(
            name=mockup.concept_name,
            description=mockup.description,
            image_prompt=(
                f"Website design for {self.input.url}. Style: {mockup.concept_name}. "
                f"{mockup.description}"
            ),
        )

    # Fullscreen viewer

    def open_fullscreen(self, image_url: str):
        """Show an image fullscreen; zoom and pan start fresh."""
        self.fullscreen_image = image_url
        self.zoom.reset()

    def close_fullscreen(self):
        self.fullscreen_image = None
