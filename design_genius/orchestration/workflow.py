"""
Entry points used by the front-ends: full generation runs, single-view
refinement and company info auto-fill.
"""

from typing import Optional

from design_genius.io.image_loader import ImageLoader
from design_genius.models import (
    DeviceType,
    GeneratedMockup,
    GenerationInput,
    GenerationResult,
)
from design_genius.orchestration.board import MockupBoard
from design_genius.orchestration.graph import create_design_graph
from design_genius.orchestration.nodes import MISSING_SCREENSHOT_ERROR
from design_genius.utils.llm_logger import get_logger


UNREADABLE_SCREENSHOT_ERROR = "The screenshot could not be read as an image."


def should_autofill(url: str) -> bool:
    """A URL is worth researching once it has a dot and more than 4 characters."""
    url = (url or "").strip()
    return "." in url and len(url) > 4


class DesignWorkflow:
    """Runs the generation graph and refinement against one MockupBoard."""

    def __init__(
        self,
        service,
        board: Optional[MockupBoard] = None,
        image_loader: Optional[ImageLoader] = None,
    ):
        """
        Initialize the workflow.

        Args:
            service: GeminiDesignService (or any object with the same coroutines).
            board: UI state container receiving live updates (a new one if not provided).
            image_loader: Loader used to normalize uploads to PNG.
        """
        self.service = service
        self.board = board or MockupBoard()
        self.image_loader = image_loader or ImageLoader()
        self.app = create_design_graph()

    def _prepare_image(self, data: Optional[bytes]) -> Optional[bytes]:
        if not data:
            return None
        return self.image_loader.to_png_bytes(data)

    async def generate(self, generation_input: GenerationInput) -> GenerationResult:
        """
        Run research, seeding and rendering for one submission.

        Never raises for API failures: a research failure is reported through
        ``GenerationResult.error`` (and the board), image failures through the
        individual cards.
        """
        self.board.input = generation_input

        if not generation_input.screenshot:
            self.board.fail_run(MISSING_SCREENSHOT_ERROR)
            return GenerationResult(error=MISSING_SCREENSHOT_ERROR)

        self.board.begin_run()

        try:
            screenshot = self._prepare_image(generation_input.screenshot)
        except ValueError as e:
            get_logger().log_event("workflow", "Screenshot rejected", e, severity="error")
            self.board.fail_run(UNREADABLE_SCREENSHOT_ERROR)
            return GenerationResult(error=UNREADABLE_SCREENSHOT_ERROR)

        try:
            logo = self._prepare_image(generation_input.logo)
        except ValueError as e:
            # The logo is optional, so an unreadable one is dropped
            get_logger().log_event("workflow", "Logo ignored", e)
            logo = None

        final_state = await self.app.ainvoke(
            {
                "url": generation_input.url,
                "company_info": generation_input.company_info,
                "screenshot": screenshot,
                "logo": logo,
            },
            config={"configurable": {"service": self.service, "board": self.board}},
        )

        return GenerationResult(
            concepts=final_state.get("concepts", []),
            sources=final_state.get("sources", []),
            mockups=final_state.get("mockups", []),
            error=final_state.get("error"),
        )

    async def regenerate_view(
        self,
        mockup_id: str,
        device_type: Optional[DeviceType] = None,
    ) -> Optional[GeneratedMockup]:
        """
        Refine and re-render one view of a card.

        Uses the board's current view mode when ``device_type`` is not given.
        On failure the previous image stays in place.

        Returns:
            The card after the attempt, or None if no card has that id.
        """
        if self.board.get(mockup_id) is None:
            return None

        device_type = DeviceType(device_type or self.board.view_mode)
        concept = self.board.concept_for(mockup_id)
        self.board.update(mockup_id, "regenerating", regenerating_view=device_type)

        try:
            logo = self._prepare_image(self.board.input.logo)
        except ValueError:
            logo = None

        try:
            image_url = await self.service.refine_and_regenerate_mockup(
                concept,
                self.board.input.company_info,
                device_type,
                logo,
            )
        except Exception as e:
            get_logger().log_event("refine", f"Regeneration failed for {mockup_id}", e, severity="error")
            return self.board.update(mockup_id, "regenerated", regenerating_view=None)

        current = self.board.get(mockup_id).with_image(device_type, image_url)
        updated = current.model_copy(update={"regenerating_view": None})
        self.board.replace(updated, "regenerated")
        return updated

    async def autofill_company_info(self, url: str) -> str:
        """
        Fill the board's company info from a URL.

        Leaves the existing text untouched when the URL is not usable or the
        lookup comes back empty.
        """
        if not should_autofill(url):
            return self.board.input.company_info

        self.board.is_fetching_info = True
        try:
            info = await self.service.get_company_info(url)
        finally:
            self.board.is_fetching_info = False

        if info:
            self.board.input = self.board.input.model_copy(update={"url": url, "company_info": info})
        return self.board.input.company_info
