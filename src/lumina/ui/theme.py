"""Theme, color definitions and QSS stylesheet."""

from __future__ import annotations

# ── Color palette (dark, emerald accent) ──

COLORS = {
    "primary": "#10B981",
    "primary_light": "#1F3B33",
    "bg": "#14161A",
    "panel_bg": "#1C1F24",
    "border": "#2C3038",
    "text": "#F2F4F7",
    "text_muted": "#8A919C",
    "selected_bg": "#24303A",
    "hover_bg": "#20242B",
    "error": "#E74C3C",
    "code_bg": "#23272E",
}

# ── Fonts ──

FONT_FAMILY = "-apple-system, 'SF Pro Text', 'Helvetica Neue', 'Segoe UI', Roboto, sans-serif"
MONO_FAMILY = "'SF Mono', Menlo, Consolas, 'Liberation Mono', monospace"

# ── QSS Stylesheet ──


def build_stylesheet() -> str:
    """Build the application-wide QSS stylesheet."""
    c = COLORS
    return f"""
/* ── Global ── */
QWidget {{
    font-family: {FONT_FAMILY};
    font-size: 13px;
    color: {c["text"]};
    background-color: {c["bg"]};
}}

/* ── Launcher window ── */
QWidget#LauncherWindow {{
    border: 1px solid {c["border"]};
    border-radius: 14px;
}}

/* ── Search input ── */
QLineEdit#SearchInput {{
    font-size: 20px;
    padding: 12px 14px;
    border: none;
    border-bottom: 1px solid {c["border"]};
    background-color: transparent;
}}

/* ── Result list ── */
QListView {{
    border: none;
    background-color: transparent;
    outline: none;
}}

/* ── AI answer ── */
QTextBrowser#AiAnswer {{
    border: 1px solid {c["border"]};
    border-radius: 10px;
    background-color: {c["panel_bg"]};
    padding: 8px;
}}

/* ── Buttons ── */
QPushButton {{
    background-color: {c["panel_bg"]};
    border: 1px solid {c["border"]};
    border-radius: 6px;
    padding: 5px 12px;
}}
QPushButton:hover {{
    border-color: {c["primary"]};
    color: {c["primary"]};
}}
QPushButton#PrimaryButton {{
    background-color: {c["primary"]};
    color: white;
    border: none;
    font-weight: bold;
}}

/* ── Status label ── */
QLabel#StatusLabel {{
    font-size: 12px;
    color: {c["text_muted"]};
    padding: 4px 14px;
}}

/* ── Settings form ── */
QLineEdit, QComboBox, QPlainTextEdit {{
    border: 1px solid {c["border"]};
    border-radius: 6px;
    padding: 6px 10px;
    background-color: {c["panel_bg"]};
}}
QLineEdit:focus, QComboBox:focus, QPlainTextEdit:focus {{
    border-color: {c["primary"]};
}}
"""
