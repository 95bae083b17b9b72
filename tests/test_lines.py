from __future__ import annotations

from filetail.ingestion.lines import LineSplitter


def test_splits_on_all_terminators():
    splitter = LineSplitter()
    lines = splitter.feed("CRLF\r\nLF\nCR\rCRCR\r\rtrail")
    assert lines == ["CRLF", "LF", "CR", "CRCR\r"]
    assert splitter.pending == "trail"


def test_same_lines_whatever_the_chunking():
    text = "CRLF\r\nLF\nCR\rCRCR\r\rtrail"
    for cut in range(1, len(text)):
        splitter = LineSplitter()
        lines = splitter.feed(text[:cut]) + splitter.feed(text[cut:])
        assert lines == ["CRLF", "LF", "CR", "CRCR\r"], cut


def test_trailing_cr_is_held_back():
    splitter = LineSplitter()
    assert splitter.feed("abc\r") == []
    assert splitter.pending == "abc\r"
    assert splitter.feed("\n") == ["abc"]
    assert splitter.pending == ""


def test_cr_followed_by_text_ends_line():
    splitter = LineSplitter()
    assert splitter.feed("abc\r") == []
    assert splitter.feed("def\n") == ["abc", "def"]


def test_blank_lines():
    splitter = LineSplitter()
    assert splitter.feed("\n\na\r\n\r\n") == ["", "", "a", ""]


def test_unterminated_text_is_never_returned():
    splitter = LineSplitter()
    assert splitter.feed("no newline") == []
    assert splitter.feed(" yet") == []
    assert splitter.pending == "no newline yet"


def test_reset_discards_carry_over():
    splitter = LineSplitter()
    splitter.feed("partial\r")
    splitter.reset()
    assert splitter.pending == ""
    assert splitter.feed("next\n") == ["next"]
