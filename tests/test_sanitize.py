from __future__ import annotations

from agtelemetry._redact import redact_for_log
from agtelemetry.sanitize import escape_markdown, sanitize_label, sanitize_notification_content


def test_control_and_zero_width_characters_are_removed() -> None:
    text = "Gemini\u200b Pro\x00\x1b[31m \ufeff(High)"

    assert sanitize_notification_content(text) == "Gemini Pro[31m (High)"


def test_whitespace_is_collapsed() -> None:
    assert sanitize_notification_content("  Low \t fuel \n\n now  ") == "Low fuel now"


def test_truncation_appends_ellipsis() -> None:
    result = sanitize_notification_content("x" * 150, max_length=100)

    assert len(result) == 100
    assert result.endswith("...")


def test_tiny_limits_keep_one_character() -> None:
    assert sanitize_notification_content("abcdefgh", max_length=1) == "a..."


def test_empty_input() -> None:
    assert sanitize_notification_content(None) == ""
    assert sanitize_label("") == ""
    assert escape_markdown(None) == ""


def test_label_default_limit() -> None:
    assert len(sanitize_label("m" * 200)) == 64


def test_escape_markdown() -> None:
    assert escape_markdown("[click](http://x) *now*") == r"\[click\]\(http://x\) \*now\*"


def test_redacts_sensitive_keys_at_any_depth() -> None:
    value = {
        "userStatus": {"email": "me@example.com", "name": "me"},
        "headers": {"X-Codeium-Csrf-Token": "abc", "api_key": "k"},
        "csrf_token": "abc",
    }

    redacted = redact_for_log(value)

    assert redacted["userStatus"] == {"email": "<redacted>", "name": "me"}
    assert redacted["headers"] == {"X-Codeium-Csrf-Token": "<redacted>", "api_key": "<redacted>"}
    assert redacted["csrf_token"] == "<redacted>"


def test_caps_strings_and_collections() -> None:
    redacted = redact_for_log({"text": "a" * 20, "items": list(range(5))}, max_string=8, max_items=3)

    assert redacted["text"] == "aaaaaaaa…<truncated>"
    assert redacted["items"] == [0, 1, 2, "<2 more items>"]
    assert redact_for_log(b"\x00" * 4) == "<bytes:4b>"
