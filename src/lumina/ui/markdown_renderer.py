"""Markdown → HTML for the AI answer pane."""

from __future__ import annotations

import markdown

from lumina.core.stream import trim_transcript
from lumina.ui.theme import COLORS, MONO_FAMILY

_MD = markdown.Markdown(extensions=["fenced_code", "tables", "nl2br"])

# QTextBrowser supports a CSS subset only: no border-radius on blocks, no flex.
_ANSWER_CSS = f"""
body {{ font-size: 14px; line-height: 1.6; color: {COLORS["text"]}; margin: 0; }}
p {{ margin: 0 0 10px 0; }}
h1, h2, h3 {{ color: {COLORS["primary"]}; margin: 12px 0 6px 0; }}
h1 {{ font-size: 17px; }}
h2 {{ font-size: 15px; }}
h3 {{ font-size: 14px; }}
a {{ color: {COLORS["primary"]}; }}
code {{ font-family: {MONO_FAMILY}; background-color: {COLORS["code_bg"]}; }}
pre {{
    font-family: {MONO_FAMILY};
    font-size: 12px;
    background-color: {COLORS["code_bg"]};
    border: 1px solid {COLORS["border"]};
    padding: 8px 10px;
    margin: 6px 0 10px 0;
}}
blockquote {{ color: {COLORS["text_muted"]}; margin: 6px 0 6px 12px; }}
table {{ border-collapse: collapse; margin: 6px 0; }}
th {{ background-color: {COLORS["panel_bg"]}; font-weight: 600; }}
th, td {{ border: 1px solid {COLORS["border"]}; padding: 3px 8px; }}
li {{ margin: 2px 0; }}
hr {{ border: none; border-top: 1px solid {COLORS["border"]}; }}
"""


def render_markdown(text: str) -> str:
    """Convert markdown to an HTML document styled for the answer pane."""
    _MD.reset()
    body = _MD.convert(text)
    return f"<html><head><style>{_ANSWER_CSS}</style></head><body>{body}</body></html>"


def render_transcript(transcript: str) -> str:
    """Sanitize a (possibly partial) AI transcript and render it."""
    return render_markdown(trim_transcript(transcript))
