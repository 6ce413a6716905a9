from agent.formatting import blocks_to_html, format_ai_response

REPLY = """## Weather data

* NOAA hourly temperature
- Local humidity sensors

1. Holiday calendar
Plain paragraph with <b>markup</b>.
"""


def test_blocks_by_line_kind():
    assert format_ai_response(REPLY) == [
        ("h4", "Weather data"),
        ("bullet", "NOAA hourly temperature"),
        ("bullet", "Local humidity sensors"),
        ("numbered", "Holiday calendar"),
        ("paragraph", "Plain paragraph with <b>markup</b>."),
    ]


def test_empty_text_has_no_blocks():
    assert format_ai_response("") == []
    assert format_ai_response("\n  \n") == []


def test_html_is_escaped():
    out = blocks_to_html(format_ai_response(REPLY))
    assert "<h4" in out and "</h4>" in out
    assert "&lt;b&gt;markup&lt;/b&gt;" in out
    assert out.count("<li") == 3
