"""
Keyword classifier tests.
"""

import pytest

from scanner.classifier import KeywordClassifier, matches


def test_matches_is_case_insensitive():
    assert matches("<html>KEYWORD1 present</html>", ["keyword1"]) is True


def test_matches_uppercase_keyword_in_lowercase_content():
    assert matches("<p>keyword2 lower</p>", ["KeyWord2"]) is True


def test_no_keyword_present():
    assert matches("nothing here", ["keyword1", "keyword2"]) is False


def test_empty_content_never_matches():
    assert matches("", ["keyword1", "keyword2"]) is False


def test_any_keyword_is_enough():
    assert matches("only the second one: keyword2", ["keyword1", "keyword2"]) is True


def test_non_ascii_keywords():
    assert matches("<title>网站 关键词1 测试</title>", ["关键词1"]) is True


def test_classifier_freezes_keywords_and_drops_blanks():
    source = ["alpha", "  ", "", "beta "]
    classifier = KeywordClassifier(source)
    source.append("gamma")

    assert classifier.keywords == ("alpha", "beta")
    assert classifier.matches("BETA release") is True
    assert classifier.matches("gamma ray") is False


def test_classifier_requires_a_keyword():
    with pytest.raises(ValueError):
        KeywordClassifier(["", "   "])
