import pytest

from madrona.path import (
    MAX_SYMBOLS,
    Path,
    add_extension_to_path,
    but_last,
    fifth,
    first,
    fourth,
    get_extension_from_path,
    head,
    last,
    last_n,
    nth,
    path_to_text,
    remove_extension_from_path,
    root_path_to_text,
    second,
    substitute,
    tail,
    text_to_path,
    third,
)


def test_parse_into_symbols():
    assert list(Path("a/b/c")) == ["a", "b", "c"]


def test_repeated_and_trailing_separators_are_skipped():
    assert Path("//a//b/") == Path("a/b")
    assert len(Path("//a//b/")) == 2


def test_custom_separator():
    assert Path("a.b", separator=".") == Path("a/b")


def test_bad_separator():
    with pytest.raises(ValueError):
        Path("a", separator="::")


def test_bad_part_type():
    with pytest.raises(TypeError):
        Path(3)


def test_unicode_symbols():
    p = Path("hello/小林/café")
    assert list(p) == ["hello", "小林", "café"]


def test_max_depth():
    text = "/".join(str(i) for i in range(MAX_SYMBOLS + 5))
    p = Path(text)
    assert len(p) == MAX_SYMBOLS
    assert last(p) == str(MAX_SYMBOLS - 1)


def test_concatenation():
    assert Path(Path("a/b"), Path("c"), "d/e") == Path("a/b/c/d/e")


def test_bool():
    assert not Path()
    assert not Path("")
    assert Path("x")


def test_equality_ignores_copy_and_accepts_text():
    assert Path("a/b", copy=3) == Path("a/b")
    assert Path("a/b") == "a/b"
    assert Path("a/b") != Path("a/c")
    assert hash(Path("a/b", copy=2)) == hash(Path("a/b"))


def test_begins_with():
    p = Path("a/b/c")
    assert p.begins_with(Path("a/b"))
    assert p.begins_with(Path())
    assert not p.begins_with(Path("a/c"))
    assert not Path("a").begins_with(p)


def test_positional_accessors():
    p = Path("a/b/c/d/e")
    assert (head(p), first(p), second(p), third(p), fourth(p), fifth(p)) == (
        "a", "a", "b", "c", "d", "e")
    assert nth(p, 2) == "c"
    assert nth(p, 5) == ""
    assert second(Path("a")) == ""
    assert head(Path()) == ""


def test_tail_keeps_copy():
    t = tail(Path("a/b/c", copy=2))
    assert t == Path("b/c")
    assert t.copy == 2


def test_but_last_and_last():
    p = Path("a/b/c")
    assert but_last(p) == Path("a/b")
    assert last(p) == "c"
    assert last(Path()) == ""
    assert not but_last(Path())


def test_last_n():
    p = Path("a/b/c/d")
    assert last_n(p, 2) == Path("c/d")
    assert last_n(p, 4) == p
    assert not last_n(p, 5)


def test_substitute_symbol():
    p = Path("a/x/b/x", copy=1)
    r = substitute(p, "x", "y")
    assert r == Path("a/y/b/y")
    assert r.copy == 1


def test_substitute_path():
    r = substitute(Path("a/x/b"), "x", Path("c/d"))
    assert r == Path("a/c/d/b")


def test_text_round_trip():
    text = "one/two/three"
    assert path_to_text(text_to_path(text)) == text
    assert path_to_text(text_to_path("a:b", ":"), ":") == "a:b"
    assert path_to_text(Path()) == ""


def test_root_path_to_text():
    assert root_path_to_text(Path("a/b")) == "/a/b"
    assert root_path_to_text(Path()) == ""


def test_str_shows_copy():
    assert str(Path("a/b")) == "a/b"
    assert str(Path("a/b", copy=2)) == "a/b(#2)"


def test_extensions():
    p = Path("golly/gee/whiz.txt")
    assert get_extension_from_path(p) == "txt"
    assert remove_extension_from_path(p) == Path("golly/gee/whiz")
    assert add_extension_to_path(remove_extension_from_path(p), "txt") == p
    assert get_extension_from_path(Path("a/noext")) == ""