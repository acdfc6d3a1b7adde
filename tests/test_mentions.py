from __future__ import annotations

import pytest

from hrdesk.services.mentions import active_mention_prefix, extract_mentions


def test_extracts_email_shaped_mentions_in_order() -> None:
    text = "ping @user@example.com and @nobody@nowhere.test, thanks"
    assert extract_mentions(text) == ["user@example.com", "nobody@nowhere.test"]


def test_plain_addresses_and_short_handles_are_not_mentions() -> None:
    assert extract_mentions("mail user@example.com or ask @jane") == []


def test_repeated_mentions_collapse() -> None:
    assert extract_mentions("@a@b.io @a@b.io @c@d.io") == ["a@b.io", "c@d.io"]


def test_empty_text_has_no_mentions() -> None:
    assert extract_mentions("") == []


@pytest.mark.parametrize(
    ("text", "cursor", "expected"),
    [
        ("hello @jo", None, "jo"),
        ("hello @", None, ""),
        ("hello @jo there", 9, "jo"),
        ("hello @jo there", None, None),
        ("no mention here", None, None),
    ],
)
def test_active_mention_prefix(text: str, cursor: int | None, expected: str | None) -> None:
    assert active_mention_prefix(text, cursor) == expected
