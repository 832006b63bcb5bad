"""
LangGraph turn graph.
Orchestrates context extraction, guideline selection, suggestions and scoring.
"""

import logging

from langgraph.graph import StateGraph, START, END

from shopping_assistant.core.graph.nodes import TurnNodes
from shopping_assistant.core.graph.state import TurnState

logger = logging.getLogger(__name__)


def create_graph(nodes: TurnNodes) -> StateGraph:
    """
    Create the turn graph.

    Flow:
        START -> extract_context -> (select_guidelines, suggest_products) -> score_readiness -> END
    """
    graph = StateGraph(TurnState)

    # Add nodes
    graph.add_node("extract_context", nodes.extract_context)
    graph.add_node("select_guidelines", nodes.select_guidelines)
    graph.add_node("suggest_products", nodes.suggest_products)
    graph.add_node("score_readiness", nodes.score_readiness)

    # Define flow; the two middle nodes run in parallel
    graph.add_edge(START, "extract_context")
    graph.add_edge("extract_context", "select_guidelines")
    graph.add_edge("extract_context", "suggest_products")
    graph.add_edge(["select_guidelines", "suggest_products"], "score_readiness")
    graph.add_edge("score_readiness", END)

    return graph


def compile_turn_graph(nodes: TurnNodes):
    """Compile the turn graph. Turns are persisted by the caller, so no checkpointer."""
    compiled = create_graph(nodes).compile()
    logger.info("Turn graph compiled")
    return compiled
