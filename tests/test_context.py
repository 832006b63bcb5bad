import pytest

from shopping_assistant.core.context import (
    classify_intent,
    classify_shopping_intent,
    determine_conversation_stage,
    extract_context,
    extract_keywords,
)
from shopping_assistant.core.errors import InputValidationError
from shopping_assistant.core.models import (
    ChatMessage,
    ConversationStage,
    ShoppingIntent,
    UserIntent,
)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Hello there!", UserIntent.GREETING),
        ("I need assistance", UserIntent.HELP_REQUEST),
        ("How much does this cost?", UserIntent.PRICING_INQUIRY),
        ("Can I get a demo?", UserIntent.DEMO_REQUEST),
        ("What features does this have?", UserIntent.FEATURE_INQUIRY),
        ("Compare this to the alternative products", UserIntent.COMPARISON_REQUEST),
        ("I want to buy this", UserIntent.PURCHASE_INTENT),
        ("I have concerns about this product", UserIntent.OBJECTION_HANDLING),
        ("Are the reviews good?", UserIntent.REVIEW_INQUIRY),
        ("Is this in stock?", UserIntent.AVAILABILITY_INQUIRY),
        ("What is your return policy?", UserIntent.SERVICE_INQUIRY),
        ("Can you recommend a laptop?", UserIntent.PRODUCT_RECOMMENDATION),
        ("Tell me about the blue one", UserIntent.GENERAL_INQUIRY),
        ("", UserIntent.UNKNOWN),
        ("   ", UserIntent.UNKNOWN),
    ],
)
def test_classify_intent(message, expected):
    assert classify_intent(message) == expected


def test_greeting_needs_whole_word():
    # "this" and "which" contain "hi"
    assert classify_intent("Is this one better than which?") != UserIntent.GREETING


def test_special_is_not_a_spec_question():
    assert classify_intent("Any special offers today") != UserIntent.FEATURE_INQUIRY


@pytest.mark.parametrize(
    "message, expected",
    [
        ("I want to buy a laptop", ShoppingIntent.BUYING),
        ("iPhone vs Galaxy", ShoppingIntent.COMPARING),
        ("I have a question about shipping", ShoppingIntent.SUPPORT),
        ("Just looking around", ShoppingIntent.BROWSING),
    ],
)
def test_classify_shopping_intent(message, expected):
    assert classify_shopping_intent(message) == expected


def test_extract_keywords_vocabulary_and_long_words():
    keywords = extract_keywords("I need a new smartphone for cooking")
    assert "smartphone" in keywords
    assert "cooking" in keywords
    assert "new" not in keywords


def test_extract_keywords_strips_punctuation_and_dedupes():
    keywords = extract_keywords("Hello, I need help with skincare products. Skincare!")
    assert "help" in keywords
    assert "skincare" in keywords
    assert keywords.count("skincare") == 1
    assert "hello" in keywords


def test_extract_keywords_keeps_currency_and_numbers():
    keywords = extract_keywords("phone under $500 with 128 storage")
    assert "$500" in keywords
    assert "128" in keywords


def test_extract_keywords_model_tokens():
    keywords = extract_keywords("Is the iPhone 13 better than the Galaxy S10?")
    assert "iphone_13" in keywords
    assert "galaxy_s10" in keywords


def test_extract_keywords_empty():
    assert extract_keywords("") == []


@pytest.mark.parametrize(
    "turns, stage",
    [
        (0, ConversationStage.INTRODUCTION),
        (1, ConversationStage.INTRODUCTION),
        (2, ConversationStage.DISCOVERY),
        (3, ConversationStage.RECOMMENDATION),
        (4, ConversationStage.RECOMMENDATION),
        (5, ConversationStage.PRESENTATION),
        (6, ConversationStage.PRESENTATION),
        (7, ConversationStage.OBJECTION_HANDLING),
        (8, ConversationStage.OBJECTION_HANDLING),
        (9, ConversationStage.CLOSING),
        (25, ConversationStage.CLOSING),
    ],
)
def test_determine_conversation_stage(turns, stage):
    assert determine_conversation_stage(turns) == stage


def test_stage_never_goes_back():
    order = list(ConversationStage)
    positions = [order.index(determine_conversation_stage(n)) for n in range(1, 15)]
    assert positions == sorted(positions)


def test_extract_context_first_message():
    context = extract_context("Hi, I need a phone for photography under $500")

    assert context.user_intent == UserIntent.GREETING
    assert context.conversation_stage == ConversationStage.INTRODUCTION
    assert context.budget_range == "300-500"
    assert "phone" in context.keywords
    assert context.is_topic_change is False


def test_extract_context_counts_only_user_turns():
    history = [
        ChatMessage.user("I need a laptop"),
        ChatMessage.assistant("Sure, what is your budget?"),
        ChatMessage.user("Around $1000"),
        ChatMessage.assistant("Here are some options"),
    ]
    context = extract_context("Which has the best battery?", history)
    assert context.conversation_stage == ConversationStage.RECOMMENDATION


def test_extract_context_detects_topic_change():
    history = [
        ChatMessage.user("I need a new laptop for work"),
        ChatMessage.assistant("Here are some laptops"),
    ]
    context = extract_context("Actually, I'm looking for a red dress", history)
    assert context.is_topic_change is True


def test_extract_context_same_topic():
    history = [ChatMessage.user("I need a new laptop")]
    context = extract_context("Does it come with a good camera?", history)
    assert context.is_topic_change is False


def test_extract_context_rejects_non_text():
    with pytest.raises(InputValidationError):
        extract_context(None)


def test_context_to_dict():
    data = extract_context("Compare iPhone vs Samsung").to_dict()
    assert data["user_intent"] == "comparison_request"
    assert data["shopping_intent"] == "comparing"
    assert data["conversation_stage"] == "introduction"
    assert data["is_topic_change"] is False
