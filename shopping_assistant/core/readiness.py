"""
Purchase-readiness scoring.
"""

import re

from shopping_assistant.core.models import ChatMessage, Suggestion, user_messages

TURN_POINTS = 5
TURN_POINTS_CAP = 30
PURCHASE_POINTS = 5
CONFIDENT_SUGGESTION_POINTS = 20
CONFIDENT_SUGGESTION_THRESHOLD = 0.7
DETAIL_POINTS = 10
MAX_SCORE = 100

PURCHASE_PATTERN = re.compile(
    r"\b(?:buy(?:ing)?|purchas(?:e|es|ed|ing)|orders?|ordering|prices?|pricing"
    r"|costs?|shipping|deliver(?:y|ies)?|warrant(?:y|ies))\b",
    re.IGNORECASE,
)
DETAIL_PATTERN = re.compile(
    r"\b(?:specifications?|specs?|reviews?|ratings?|compar(?:e|es|ed|ing|ison)|features?)\b",
    re.IGNORECASE,
)


def score_purchase_readiness(history: list[ChatMessage], suggestions: list[Suggestion]) -> int:
    """
    Score how close the user is to buying, from 0 to 100.

    Counts user turns, purchase and detail vocabulary in the user's
    messages, and whether the best suggestion is a confident one.
    """
    turns = user_messages(history)

    score = min(len(turns) * TURN_POINTS, TURN_POINTS_CAP)
    for text in turns:
        score += PURCHASE_POINTS * len(PURCHASE_PATTERN.findall(text))
        score += DETAIL_POINTS * len(DETAIL_PATTERN.findall(text))

    if suggestions and max(s.confidence for s in suggestions) > CONFIDENT_SUGGESTION_THRESHOLD:
        score += CONFIDENT_SUGGESTION_POINTS

    return max(0, min(score, MAX_SCORE))
