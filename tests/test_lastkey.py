import pytest

from vim_submode.submode import RULES, RepeatKeyRule, last_key


@pytest.mark.parametrize(
    ("lhs", "expected"),
    [
        ("]a", "]"),
        ("[a", "["),
        (">x", ">"),
        ("<C-g>j", "j"),
        ("<C-g><Tab>", "<Tab>"),
        ("<a", "<"),
        ("<C-w>+", "+"),
        ("gj", "j"),
        ("]", "]"),
    ],
)
def test_last_key(lhs: str, expected: str) -> None:
    assert last_key(lhs) == expected


def test_last_key_rejects_empty() -> None:
    with pytest.raises(ValueError):
        last_key("")


def test_rules_are_ordered_by_priority() -> None:
    assert [rule.name for rule in RULES] == [
        "open-bracket",
        "close-bracket",
        "unterminated-special",
        "shift-right",
        "trailing-key",
    ]


def test_custom_rule_list_is_honored() -> None:
    first_key = RepeatKeyRule("first-key", lambda tokens: tokens[0])

    assert last_key("<C-g>j", rules=(first_key,)) == "<C-g>"


def test_no_matching_rule_raises() -> None:
    never = RepeatKeyRule("never", lambda tokens: None)

    with pytest.raises(ValueError):
        last_key("gj", rules=(never,))
