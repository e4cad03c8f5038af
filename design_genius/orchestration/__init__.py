"""
LangGraph orchestration of the mockup generation workflow.

Research the current site, seed one card per design concept, then render a
mobile and a desktop mockup for each concept. Single views can later be
refined and re-rendered.
"""

from design_genius.orchestration.board import MockupBoard
from design_genius.orchestration.graph import create_design_graph
from design_genius.orchestration.state import DesignState
from design_genius.orchestration.workflow import DesignWorkflow, should_autofill

__all__ = [
    "create_design_graph",
    "DesignState",
    "DesignWorkflow",
    "MockupBoard",
    "should_autofill",
]
