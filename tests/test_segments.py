"""Tests for fenceview.core.segments."""

from fenceview.core.segments import (
    Code,
    CodeOpenIncomplete,
    Prose,
    ScanState,
    code_segment,
    opening_info,
    scan,
    scan_state,
)


def test_empty_buffer():
    assert scan("") == [Prose("")]


def test_plain_prose():
    assert scan("just some words\nand more") == [Prose("just some words\nand more")]


def test_open_fence_is_generating():
    assert scan("Here you go:\n```tsx\nconst a") == [
        Prose("Here you go:\n"),
        CodeOpenIncomplete("tsx"),
    ]


def test_open_fence_before_info_line_completes():
    segments = scan("intro ```ty")
    assert segments == [Prose("intro "), CodeOpenIncomplete(None)]


def test_open_fence_at_start_keeps_empty_prose():
    assert scan("```") == [Prose(""), CodeOpenIncomplete(None)]


def test_closed_fence():
    segments = scan("Intro\n```tsx\nconst a = 1;\n```\nOutro")
    assert segments == [
        Prose("Intro\n"),
        Code("const a = 1;", "tsx"),
        Prose("\nOutro"),
    ]


def test_closed_fence_without_surrounding_prose():
    assert scan("```\nx\n```") == [Code("x", None)]


def test_unlisted_tag_still_opens_fence():
    segments = scan("```rust\nfn main() {}\n```")
    assert segments == [Code("fn main() {}", None)]


def test_tag_with_filename_annotation():
    segments = scan("```tsx{filename=App.tsx}\nlet x;\n```")
    assert segments == [Code("let x;", "tsx")]


def test_only_first_fence_is_code():
    text = "a\n```js\none\n```\nb\n```py\ntwo\n```\n"
    segments = scan(text)
    assert segments[1] == Code("one", None)
    assert segments[2] == Prose("\nb\n```py\ntwo\n```\n")
    assert sum(isinstance(s, (Code, CodeOpenIncomplete)) for s in segments) == 1


def test_javascript_language_hint():
    segments = scan("```javascript\nalert(1)\n```")
    assert segments == [Code("alert(1)", "javascript")]


def test_opening_info():
    assert opening_info("no fence") is None
    assert opening_info("```tsx") is None
    assert opening_info("x```tsx{filename=A.tsx}\nbody") == "tsx{filename=A.tsx}"


def test_code_segment_and_state():
    assert code_segment(scan("prose")) is None
    assert scan_state(scan("prose")) is ScanState.PROSE
    assert scan_state(scan("```tsx\nabc")) is ScanState.GENERATING
    assert scan_state(scan("```tsx\nabc\n```")) is ScanState.COMPLETE


def test_settled_prose_is_prefix_stable():
    """Appending text never rewrites prose before the fence."""
    full = "Some intro text.\n```tsx{filename=App.tsx}\nexport default 1;\n```\nThat's it."
    opener = full.index("```")
    for cut in range(opener + 3, len(full) + 1):
        segments = scan(full[:cut])
        if full[:opener]:
            assert segments[0] == Prose(full[:opener])


def test_state_only_advances():
    full = "hi\n```tsx\nconst x = 1;\n```\nbye ``` trailing"
    order = [ScanState.PROSE, ScanState.GENERATING, ScanState.COMPLETE]
    previous = ScanState.PROSE
    for cut in range(len(full) + 1):
        state = scan_state(scan(full[:cut]))
        assert order.index(state) >= order.index(previous)
        previous = state
    assert previous is ScanState.COMPLETE


def test_code_content_stable_once_closed():
    base = "```tsx\nconst x = 1;\n```"
    assert code_segment(scan(base)) == code_segment(scan(base + "\nmore ```js\n"))
