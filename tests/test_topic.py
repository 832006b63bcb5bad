from shopping_assistant.core.context.topic import categorize_keywords, detect_topic_change


def test_categorize_keywords():
    assert categorize_keywords(["need", "laptop"]) == "electronics"
    assert categorize_keywords(["red", "dress"]) == "fashion"
    assert categorize_keywords(["hello"]) is None
    assert categorize_keywords([]) is None


def test_first_message_is_never_a_topic_change():
    assert detect_topic_change(["dress"], []) is False


def test_change_between_categories():
    history = [["laptop", "work"], ["battery"]]
    assert detect_topic_change(["looking", "dress"], history) is True


def test_same_category_is_not_a_change():
    assert detect_topic_change(["tablet"], [["phone"]]) is False


def test_uncategorized_message_is_not_a_change():
    assert detect_topic_change(["thanks"], [["phone"]]) is False


def test_uncategorized_history_is_not_a_change():
    assert detect_topic_change(["dress"], [["hello"], ["thanks"]]) is False


def test_only_recent_turns_count():
    history = [["dress"], ["hello"], ["thanks"], ["laptop"]]
    # The dress turn is outside the window, so the current topic is electronics
    assert detect_topic_change(["dress"], history) is True
