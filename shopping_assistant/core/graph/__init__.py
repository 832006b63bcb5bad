"""
LangGraph turn orchestration.
"""

from shopping_assistant.core.graph.graph import compile_turn_graph, create_graph
from shopping_assistant.core.graph.nodes import GuidelineSource, TurnNodes
from shopping_assistant.core.graph.state import TurnState

__all__ = [
    "compile_turn_graph",
    "create_graph",
    "GuidelineSource",
    "TurnNodes",
    "TurnState",
]
