import pytest

from shopping_assistant.core.errors import InputValidationError
from shopping_assistant.core.guidelines import filter_guidelines, is_applicable
from shopping_assistant.core.models import (
    ConversationContext,
    ConversationStage,
    Guideline,
    GuidelineConditions,
    UserIntent,
)


def make_guideline(name, priority=5, is_active=True, **conditions):
    return Guideline(
        id=name,
        name=name,
        content=f"{name} content",
        priority=priority,
        is_active=is_active,
        conditions=GuidelineConditions(**conditions) if conditions else None,
    )


@pytest.fixture
def context():
    return ConversationContext(
        user_intent=UserIntent.PRICING_INQUIRY,
        keywords=["smartphone", "price"],
        conversation_stage=ConversationStage.DISCOVERY,
    )


def test_unconditional_guideline_applies(context):
    assert is_applicable(make_guideline("always"), context)


def test_intent_only_guideline(context):
    assert is_applicable(make_guideline("pricing", intents=("pricing_inquiry",)), context)
    assert not is_applicable(make_guideline("demo", intents=("demo_request",)), context)


def test_stage_condition(context):
    assert is_applicable(make_guideline("s", stages=("discovery", "closing")), context)
    assert not is_applicable(make_guideline("s", stages=("closing",)), context)


def test_keywords_match_substrings_both_ways(context):
    # "phone" is inside "smartphone"
    assert is_applicable(make_guideline("k", keywords=("phone",)), context)
    # "smartphones" contains "smartphone"
    assert is_applicable(make_guideline("k", keywords=("Smartphones",)), context)
    assert not is_applicable(make_guideline("k", keywords=("dress",)), context)


def test_all_declared_axes_must_match(context):
    guideline = make_guideline("both", intents=("pricing_inquiry",), stages=("closing",))
    assert not is_applicable(guideline, context)


def test_missing_context_values_never_block():
    guideline = make_guideline(
        "g", intents=("demo_request",), stages=("closing",), keywords=("laptop",)
    )
    assert is_applicable(guideline, ConversationContext())


def test_filter_sorts_by_priority_and_drops_inactive(context):
    guidelines = [
        make_guideline("low", priority=2),
        make_guideline("high", priority=9),
        make_guideline("inactive", priority=10, is_active=False),
        make_guideline("demo", priority=8, intents=("demo_request",)),
        make_guideline("mid-a", priority=5),
        make_guideline("mid-b", priority=5),
    ]

    result = filter_guidelines(guidelines, context)

    assert [g.name for g in result] == ["high", "mid-a", "mid-b", "low"]
    assert all(g in guidelines for g in result)


def test_filter_empty():
    assert filter_guidelines([], ConversationContext()) == []


@pytest.mark.parametrize("priority", [0, 11, 5.5, True])
def test_guideline_priority_validation(priority):
    with pytest.raises(InputValidationError):
        Guideline(id=None, name="n", content="c", priority=priority)


def test_guideline_requires_name_and_content():
    with pytest.raises(InputValidationError):
        Guideline(id=None, name=" ", content="c")
    with pytest.raises(InputValidationError):
        Guideline(id=None, name="n", content="")


def test_conditions_accept_stored_names():
    guideline = Guideline.from_dict({
        "name": "Electronics",
        "content": "Compare specs",
        "priority": 9,
        "conditions": {"user_intent": ["feature_inquiry"], "context_keywords": ["laptop"]},
    })
    assert guideline.conditions.intents == ("feature_inquiry",)
    assert guideline.conditions.keywords == ("laptop",)
    assert guideline.to_dict()["conditions"] == {
        "user_intent": ["feature_inquiry"],
        "context_keywords": ["laptop"],
    }
