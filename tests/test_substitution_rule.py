import pytest

from pjros.substitution_rule import SubstitutionRule, str_split


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a.b/c", ["a", "b", "c"]),
        ("abc", ["abc"]),
        ("a..b", ["a", "", "b"]),
        ("a/", ["a", ""]),
        ("", [""]),
    ],
)
def test_str_split(text, expected):
    assert str_split(text, "./") == expected


def test_str_split_without_delimiters():
    assert str_split("a.b", "") == ["a.b"]


def test_rule_splits_parts():
    rule = SubstitutionRule("position.#", "name.#", "@.position")
    assert rule.pattern == ("position", "#")
    assert rule.alias == ("name", "#")
    assert rule.substitution == ("@", "position")
    assert rule.full_pattern == "position.#"


def test_rules_compare_by_text():
    a = SubstitutionRule("position.#", "name.#", "@.position")
    b = SubstitutionRule("position.#", "name.#", "@.position")
    c = SubstitutionRule("velocity.#", "name.#", "@.velocity")
    assert a == b
    assert a != c
    assert len({a, b, c}) == 2