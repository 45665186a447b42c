import pytest

from lightstream.path import simplify_request_path


@pytest.mark.parametrize(
    ("sample", "expected"),
    [
        ("", ""),
        ("   ", ""),
        ("/", "/"),
        ("//", "/"),
        ("abc", "abc"),
        ("abc//", "abc/"),
        ("abc/./xyz", "abc/xyz"),
        ("abc/.//xyz", "abc/xyz"),
        ("abc/../xyz", "/xyz"),
        ("/abc/./xyz", "/abc/xyz"),
        ("/abc//./xyz", "/abc/xyz"),
        ("/abc/../xyz", "/xyz"),
        ("abc/../xyz/.", "/xyz/"),
        ("/abc/../xyz/.", "/xyz/"),
        ("abc/./xyz/..", "abc/"),
        ("/abc/./xyz/..", "/abc/"),
        (".", ""),
        ("..", ""),
        ("...", "..."),
        ("....", "...."),
        (".../", ".../"),
        ("./xyz/..", "/"),
        (".//xyz/..", "/"),
        ("/./xyz/..", "/"),
        (".././xyz/..", "/"),
        ("/.././xyz/..", "/"),
        ("../../../etc/passwd", "/etc/passwd"),
        ("/../../../etc/passwd", "/etc/passwd"),
        ("   ../../../etc/passwd", "/etc/passwd"),
        ("   /../../../etc/passwd", "/etc/passwd"),
        ("   /foo/bar/../../../etc/passwd", "/etc/passwd"),
    ],
)
def test_simplify_request_path(sample, expected):
    assert simplify_request_path(sample) == expected


@pytest.mark.parametrize(
    "sample",
    ["/abc/./xyz", "../../../etc/passwd", "abc//", "/foo/bar/../baz/", "abc/./xyz/.."],
)
def test_simplify_is_idempotent(sample):
    once = simplify_request_path(sample)
    assert simplify_request_path(once) == once


@pytest.mark.parametrize(
    "sample",
    ["../../../etc/passwd", "/a/../../b/../../c", "   /x/../../../y", "a/b/c/../../../../d"],
)
def test_never_leaves_parent_segments(sample):
    result = simplify_request_path(sample)
    assert "/../" not in result
    assert not result.startswith("../")
    assert not result.endswith("/..")


def test_text_ends_at_nul():
    assert simplify_request_path("/abc\0/../xyz") == simplify_request_path("/abc")