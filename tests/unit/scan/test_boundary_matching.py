from __future__ import annotations

from resprune.scan import contains_any_token, contains_token, find_token, is_code_comment


def test_longer_identifier_is_not_a_match() -> None:
    assert find_token("getString(R.string.foo_bar)", "R.string.foo") == -1
    assert find_token("R.string.foo.bar", "R.string.foo") == -1
    assert find_token("@string/foo2", "@string/foo") == -1


def test_terminators_after_token_are_accepted() -> None:
    for suffix in ("", " ", '"', ")", ";", ",", "<", "}"):
        assert contains_token(f"x = R.string.foo{suffix}", "R.string.foo"), suffix


def test_search_resumes_after_false_positive() -> None:
    line = "val icon = if (locked) R.drawable.thumb_lock else R.drawable.thumb"

    assert find_token(line, "R.drawable.thumb") == line.rindex("R.drawable.thumb")
    assert contains_token('"@string/aaa" "@string/aa"', "@string/aa")


def test_contains_any_token_and_empty_token() -> None:
    assert contains_any_token("@id/title", ("@string/title", "@id/title"))
    assert not contains_any_token("@id/title_bar", ("@string/title", "@id/title"))
    assert find_token("anything", "") == -1


def test_code_comment_detection() -> None:
    assert is_code_comment("    // R.string.unused")
    assert is_code_comment("//R.string.unused")
    assert not is_code_comment("foo(); // R.string.unused")
    assert not is_code_comment("/* R.string.unused */")
