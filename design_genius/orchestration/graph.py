"""
LangGraph construction for the design generation workflow.

validate -> research -> seed -> render, stopping early when a step sets an error.
"""

from typing import Literal

from langgraph.graph import END, StateGraph

from design_genius.orchestration.nodes import (
    render_node,
    research_node,
    seed_node,
    validate_node,
)
from design_genius.orchestration.state import DesignState


def route_after_validation(state: DesignState) -> Literal["research", END]:
    """Only research when the input passed validation."""
    if state.get("error"):
        return END
    return "research"


def route_after_research(state: DesignState) -> Literal["seed", END]:
    """Research failures abort the whole run."""
    if state.get("error"):
        return END
    return "seed"


def create_design_graph():
    """
    Create and compile the design generation LangGraph.

    The compiled graph must be driven with ``ainvoke`` and a config whose
    ``configurable`` mapping holds ``service`` (a GeminiDesignService) and,
    optionally, ``board`` (a MockupBoard receiving live updates).

    Returns:
        Compiled LangGraph application
    """
    graph = StateGraph(DesignState)

    graph.add_node("validate", validate_node)
    graph.add_node("research", research_node)
    graph.add_node("seed", seed_node)
    graph.add_node("render", render_node)

    graph.set_entry_point("validate")

    graph.add_conditional_edges(
        "validate",
        route_after_validation,
        {
            "research": "research",
            END: END,
        }
    )
    graph.add_conditional_edges(
        "research",
        route_after_research,
        {
            "seed": "seed",
            END: END,
        }
    )

    graph.add_edge("seed", "render")
    graph.add_edge("render", END)

    return graph.compile()
