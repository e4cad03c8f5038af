"""
State management for the LangGraph design workflow.

Defines DesignState as a TypedDict with the run inputs, the research output,
the mockup cards and the run error.
"""

from typing import List, Optional, TypedDict

from design_genius.models import DesignConcept, GeneratedMockup, GroundingSource


class DesignState(TypedDict, total=False):
    """
    State for one generation run.

    All fields are optional (total=False) to allow incremental state updates.
    """

    # Inputs
    url: str
    company_info: str
    screenshot: Optional[bytes]  # PNG bytes
    logo: Optional[bytes]  # PNG bytes

    # Research output
    concepts: List[DesignConcept]
    sources: List[GroundingSource]

    # Mockup cards, one per concept
    mockups: List[GeneratedMockup]

    # User-facing error; set when the run is aborted
    error: Optional[str]
