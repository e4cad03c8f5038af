"""
Node functions for the LangGraph design workflow.

Each node takes the state, performs its step through the Gemini service and
returns a state update. The service and the optional MockupBoard travel in
``config["configurable"]``.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from langchain_core.runnables import RunnableConfig

from design_genius.models import (
    DesignConcept,
    DeviceType,
    GeneratedMockup,
    MockupStatus,
)
from design_genius.orchestration.board import MockupBoard
from design_genius.orchestration.state import DesignState
from design_genius.utils.llm_logger import get_logger


MISSING_SCREENSHOT_ERROR = "Please upload a screenshot of the current website."
ANALYSIS_FAILED_ERROR = "Failed to analyze website. Please ensure the API key is valid and try again."


def _service(config: RunnableConfig):
    service = config.get("configurable", {}).get("service")
    if service is None:
        raise ValueError("Workflow config is missing the 'service' entry")
    return service


def _board(config: RunnableConfig) -> Optional[MockupBoard]:
    return config.get("configurable", {}).get("board")


def mockup_id_for(index: int) -> str:
    return f"mockup-{index}"


async def validate_node(state: DesignState, config: RunnableConfig) -> Dict[str, Any]:
    """Stop the run before any API call when there is no screenshot."""
    if not state.get("screenshot"):
        board = _board(config)
        if board is not None:
            board.fail_run(MISSING_SCREENSHOT_ERROR)
        return {"error": MISSING_SCREENSHOT_ERROR}
    return {"error": None}


async def research_node(state: DesignState, config: RunnableConfig) -> Dict[str, Any]:
    """Research the site and obtain design concepts plus citations."""
    service = _service(config)

    try:
        concepts, sources = await service.generate_design_concepts(
            state.get("url", ""),
            state.get("company_info", ""),
            state["screenshot"],
        )
        if not concepts:
            raise ValueError("Design analysis returned no concepts")
    except Exception as e:
        get_logger().log_event("research", "Workflow failed", e, severity="error")
        board = _board(config)
        if board is not None:
            board.fail_run(ANALYSIS_FAILED_ERROR)
        return {"error": ANALYSIS_FAILED_ERROR}

    return {"concepts": concepts, "sources": sources}


async def seed_node(state: DesignState, config: RunnableConfig) -> Dict[str, Any]:
    """Create one placeholder card per concept, already marked generating."""
    concepts = state.get("concepts", [])

    mockups = []
    for index, concept in enumerate(concepts):
        mockup = GeneratedMockup(
            id=mockup_id_for(index),
            concept_name=concept.name,
            description=concept.description,
        )
        mockups.append(mockup.model_copy(update={"status": MockupStatus.GENERATING}))

    board = _board(config)
    if board is not None:
        board.seed(mockups, concepts, state.get("sources", []))

    return {"mockups": mockups}


async def _render_view(
    service,
    board: Optional[MockupBoard],
    mockup_id: str,
    concept: DesignConcept,
    logo: Optional[bytes],
    device_type: DeviceType,
) -> Tuple[DeviceType, Optional[str]]:
    """Render one view; publish it as soon as it arrives. Failures yield None."""
    try:
        image_url = await service.generate_mockup_image(concept, logo, device_type)
    except Exception as e:
        get_logger().log_event(
            "render", f"{device_type.value.capitalize()} generation failed for {mockup_id}", e
        )
        return device_type, None

    if board is not None:
        board.set_image(mockup_id, device_type, image_url)
    return device_type, image_url


async def render_concept(
    service,
    board: Optional[MockupBoard],
    mockup: GeneratedMockup,
    concept: DesignConcept,
    logo: Optional[bytes],
) -> GeneratedMockup:
    """
    Render mobile and desktop views of one concept concurrently.

    Either view may fail without affecting the other. The card is completed
    once both settle; views that produced no image are listed in
    ``failed_views``.
    """
    results = await asyncio.gather(
        _render_view(service, board, mockup.id, concept, logo, DeviceType.MOBILE),
        _render_view(service, board, mockup.id, concept, logo, DeviceType.DESKTOP),
    )

    updated = mockup
    failed_views: List[DeviceType] = []
    for device_type, image_url in results:
        if image_url is None:
            failed_views.append(device_type)
        else:
            updated = updated.with_image(device_type, image_url)

    updated = updated.model_copy(update={
        "status": MockupStatus.COMPLETED,
        "failed_views": failed_views,
    })

    if board is not None:
        board.replace(updated, "completed")
    return updated


async def render_node(state: DesignState, config: RunnableConfig) -> Dict[str, Any]:
    """Render every concept in order, two concurrent requests per concept."""
    service = _service(config)
    board = _board(config)
    logo = state.get("logo")

    rendered = []
    for mockup, concept in zip(state.get("mockups", []), state.get("concepts", [])):
        rendered.append(await render_concept(service, board, mockup, concept, logo))

    return {"mockups": rendered}
