import pytest

from newscheck.normalizer import normalize


def test_strips_headline_label_and_collapses_whitespace():
    assert normalize("Headline:   Rain   expected\n\ttomorrow", 1000) == "Rain expected tomorrow"


def test_truncates_to_max_length():
    assert normalize("abcdefghij", 4) == "abcd"
    assert len(normalize("word " * 500, 100)) <= 100


def test_removes_characters_outside_allow_list():
    assert normalize("Prices rose © 5%", 1000) == "Prices rose 5%"
    assert normalize("<b>Bold</b> claim", 1000) == "bBoldb claim"


def test_keeps_quotes_and_percentages():
    text = 'He said "rates will fall" by 2.5% this year.'
    assert normalize(text, 1000) == text


def test_drops_boilerplate_lines():
    text = "Council approves budget\nShare this on Facebook\nTags: politics, budget\nVote was unanimous."
    assert normalize(text, 1000) == "Council approves budget Vote was unanimous."


def test_keeps_boilerplate_words_inside_sentences():
    text = "The results were published in Nature and shared widely."
    assert normalize(text, 1000) == text


@pytest.mark.parametrize("value", [None, "", 42, ["text"], b"bytes"])
def test_non_string_or_empty_input_yields_empty_string(value):
    assert normalize(value, 1000) == ""


@pytest.mark.parametrize(
    "text",
    [
        "Headline: Headline: Two labels",
        "Share this first\nHeadline: exposed after removal",
        "Headline: Share this story",
        "Headline: Published findings\nBody of the story follows here.",
        "Tags: a\nHeadline: Share this\nbody",
        "Tag\nShare this\ns",
        "Sh©are the news",
        "\rShare it now\nbody text",
        "  plain   text with\n\nblank lines  ",
        "Advertising\nPublished 2024-01-01\nReal content here.",
        "Ünïcödé wörds — and dashes – everywhere",
        "x" * 300,
    ],
)
def test_normalize_is_idempotent(text):
    once = normalize(text, 120)
    assert normalize(once, 120) == once


def test_headline_over_boilerplate_word_keeps_article_body():
    body = (
        "The regional water plant will serve forty thousand homes. "
        "Engineers expect construction to finish before the end of next year."
    )
    text = f"Headline: Published findings on water plant\n{body}"

    assert normalize(text, 1000) == body


def test_single_line_starting_with_boilerplate_word_survives():
    text = "Share prices climbed after the central bank held rates steady."
    assert normalize(text, 1000) == text
    assert normalize("Headline: " + text, 1000) == text
