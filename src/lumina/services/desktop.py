"""Desktop side effects: opening paths/URLs and writing the clipboard."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices, QGuiApplication

logger = logging.getLogger(__name__)

_URL_SCHEMES = ("http://", "https://", "mailto:", "file://")


def is_url(target: str) -> bool:
    return target.lower().startswith(_URL_SCHEMES)


def open_path(target: str) -> bool:
    """Open a file, application entry or URL with the system handler."""
    raw = target.strip()
    if not raw:
        return False

    if is_url(raw):
        if sys.platform == "darwin":
            subprocess.Popen(["open", raw])
            return True
        return QDesktopServices.openUrl(QUrl(raw))

    path = Path(raw).expanduser()
    if not path.exists():
        return False

    if sys.platform == "darwin":
        subprocess.Popen(["open", str(path)])
        return True

    if path.suffix == ".desktop" and sys.platform.startswith("linux"):
        subprocess.Popen(["gio", "launch", str(path)])
        return True

    return QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))


def copy_to_clipboard(text: str) -> bool:
    clipboard = QGuiApplication.clipboard()
    if clipboard is None:
        return False
    clipboard.setText(text)
    return True
