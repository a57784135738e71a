import pytest

from vim_submode.keymaps import MapFlag
from vim_submode.submode import (
    InvalidRegistrationError,
    SubmodeRegistry,
    UnknownTriggerError,
    parse_plug_key,
    plug_key,
)


def test_register_creates_one_trigger_per_mode() -> None:
    registry = SubmodeRegistry()

    triggers = registry.register("winsize", "ni", "s", "<C-w>+", "<C-w>+")

    assert [trigger.mode for trigger in triggers] == ["n", "i"]
    assert registry.get("winsize").modes == ("n", "i")
    assert triggers[0].flags == frozenset({MapFlag.SILENT})
    assert triggers[0].tag == "winsize:<C-w>+"
    assert triggers[0].repeat_key == "+"


def test_quick_repeat_alias_from_normal_bracket_trigger() -> None:
    registry = SubmodeRegistry()

    registry.register("scrollwin", "n", "", "]z", "zz")

    assert registry.get("scrollwin").quick_repeat_alias == "z"
    assert registry.aliases() == {"scrollwin": "z"}


@pytest.mark.parametrize(
    ("modes", "lhs"),
    [("i", "]z"), ("n", "z]"), ("v", "[z"), ("n", "<C-g>j")],
)
def test_no_quick_repeat_alias_otherwise(modes: str, lhs: str) -> None:
    registry = SubmodeRegistry()

    registry.register("scrollwin", modes, "", lhs, "zz")

    assert registry.get("scrollwin").quick_repeat_alias is None


def test_reregistering_same_keys_overwrites() -> None:
    registry = SubmodeRegistry()
    registry.register("scrollwin", "n", "", "]z", "zz")

    registry.register("scrollwin", "n", "", "]z", "zt")

    definition = registry.get("scrollwin")
    assert len(definition.triggers) == 1
    assert registry.lookup("n", "]z").rhs == "zt"
    assert registry.lookup_tag("scrollwin:]z").rhs == "zt"


def test_keys_move_to_the_latest_submode() -> None:
    registry = SubmodeRegistry()
    registry.register("first", "n", "", "gj", "j")

    registry.register("second", "n", "", "gj", "jj")

    assert registry.lookup("n", "gj").name == "second"
    assert registry.get("first").triggers == {}
    with pytest.raises(UnknownTriggerError):
        registry.lookup_tag("first:gj")


def test_repeat_trigger_picks_matching_key() -> None:
    registry = SubmodeRegistry()
    registry.register("scrollwin", "n", "", "]z", "zz")
    registry.register("scrollwin", "n", "", "[z", "zt")

    definition = registry.get("scrollwin")

    assert definition.repeat_trigger("n", "[").lhs == "[z"
    assert definition.repeat_trigger("n", "]").lhs == "]z"
    assert definition.repeat_trigger("n", "x") is None
    assert definition.repeat_trigger("i", "]") is None


@pytest.mark.parametrize(
    ("name", "modes", "flags", "lhs", "rhs"),
    [
        ("", "n", "", "]z", "zz"),
        ("scrollwin", "", "", "]z", "zz"),
        ("scrollwin", "q", "", "]z", "zz"),
        ("scrollwin", "n", "", "", "zz"),
        ("scrollwin", "n", "", "]z", ""),
        ("scrollwin", "n", "<unique>", "]z", "zz"),
    ],
)
def test_malformed_registration_rejected(name, modes, flags, lhs, rhs) -> None:
    registry = SubmodeRegistry()

    with pytest.raises(InvalidRegistrationError):
        registry.register(name, modes, flags, lhs, rhs)

    assert len(registry) == 0


def test_invalid_registration_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        SubmodeRegistry().register("", "n", "", "]z", "zz")


def test_plug_key_round_trip() -> None:
    token = plug_key("enter", "scrollwin:<C-g>j")

    assert token == "<Plug>(submode-enter:scrollwin:<C-g>j)"
    assert parse_plug_key(token) == ("enter", "scrollwin:<C-g>j")
    assert parse_plug_key("<Plug>(other)") is None


def test_name_with_tag_separator_rejected() -> None:
    registry = SubmodeRegistry()

    with pytest.raises(InvalidRegistrationError):
        registry.register("a:b", "n", "", "c", "one")

    assert len(registry) == 0


def test_tags_stay_distinct_for_colon_keys() -> None:
    registry = SubmodeRegistry()
    registry.register("ab", "n", "", "c", "one")
    registry.register("a", "n", "", "b:c", "two")

    assert registry.lookup_tag("ab:c").rhs == "one"
    assert registry.lookup_tag("a:b:c").rhs == "two"
    assert parse_plug_key(plug_key("enter", "a:b:c")) == ("enter", "a:b:c")


def test_bare_bracket_trigger_has_no_alias() -> None:
    registry = SubmodeRegistry()

    registry.register("scrollwin", "n", "", "]", "zz")

    assert registry.get("scrollwin").quick_repeat_alias is None


def test_takeover_updates_previous_owner() -> None:
    registry = SubmodeRegistry()
    registry.register("scrollwin", "n", "", "]x", "zb")
    registry.register("scrollwin", "n", "", "]z", "zz")
    registry.register("scrollwin", "n", "", "<C-g>]", "zt")

    registry.register("other", "n", "", "]z", "zt")

    previous = registry.get("scrollwin")
    assert list(previous.triggers) == [("n", "]x"), ("n", "<C-g>]")]
    assert previous.quick_repeat_alias == "x"
    assert previous.repeat_trigger("n", "]").lhs == "<C-g>]"
    assert registry.get("other").quick_repeat_alias == "z"


def test_takeover_of_only_alias_trigger_clears_alias() -> None:
    registry = SubmodeRegistry()
    registry.register("scrollwin", "n", "", "]z", "zz")

    registry.register("other", "v", "", "]y", "y")
    registry.register("other", "n", "", "]z", "zt")

    assert registry.get("scrollwin").quick_repeat_alias is None
