"""Launcher window — search field, result list and AI answer pane."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QEvent, QModelIndex, QObject, Qt, QTimer
from PySide6.QtGui import QGuiApplication, QKeyEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from lumina.core.state import Error, Idle, Loading, Results, SessionState, Streaming
from lumina.ui.keymap import key_event_from_qt
from lumina.ui.markdown_renderer import render_transcript
from lumina.ui.result_list import SearchResultDelegate, SearchResultModel

if TYPE_CHECKING:
    from lumina.core.controller import QuerySessionController
    from lumina.models.search import SearchResult

WINDOW_WIDTH = 700
WINDOW_HEIGHT = 600
COMPACT_HEIGHT = 110
_BLUR_HIDE_DELAY_MS = 150


class LauncherWindow(QWidget):
    """Frameless launcher surface that renders controller state."""

    def __init__(self, controller: QuerySessionController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self.setObjectName("LauncherWindow")
        self.setWindowTitle("Lumina")
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.resize(WINDOW_WIDTH, COMPACT_HEIGHT)

        self._blur_timer = QTimer(self)
        self._blur_timer.setSingleShot(True)
        self._blur_timer.timeout.connect(self._hide_if_inactive)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 8)
        layout.setSpacing(6)

        # Header
        header = QHBoxLayout()
        header.setContentsMargins(14, 8, 14, 0)
        title = QLabel("✨ Lumina")
        title.setStyleSheet("font-weight: bold; font-size: 14px;")
        header.addWidget(title)
        header.addStretch()
        self._settings_btn = QPushButton("⚙️ Settings")
        self._settings_btn.setToolTip("Settings (Ctrl+,)")
        self._settings_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._settings_btn.clicked.connect(self._controller.open_settings)
        header.addWidget(self._settings_btn)
        layout.addLayout(header)

        # Search input
        self._input = QLineEdit()
        self._input.setObjectName("SearchInput")
        self._input.setPlaceholderText("Search anything, or type / to ask AI...")
        self._input.textChanged.connect(self._controller.set_query)
        self._input.installEventFilter(self)
        layout.addWidget(self._input)

        self._status = QLabel("")
        self._status.setObjectName("StatusLabel")
        layout.addWidget(self._status)

        # AI answer pane
        self._ai_panel = QWidget()
        ai_layout = QVBoxLayout(self._ai_panel)
        ai_layout.setContentsMargins(14, 0, 14, 0)
        ai_layout.setSpacing(6)
        self._ai_header = QLabel("🤖 AI Response")
        self._ai_header.setStyleSheet("font-weight: 600; color: #10B981;")
        ai_layout.addWidget(self._ai_header)
        self._ai_view = QTextBrowser()
        self._ai_view.setObjectName("AiAnswer")
        self._ai_view.setOpenExternalLinks(True)
        self._ai_view.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        ai_layout.addWidget(self._ai_view, stretch=1)
        actions = QHBoxLayout()
        actions.addStretch()
        self._copy_btn = QPushButton("📋 Copy")
        self._copy_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._copy_btn.clicked.connect(self._controller.copy_transcript)
        actions.addWidget(self._copy_btn)
        self._new_query_btn = QPushButton("🔄 New Query")
        self._new_query_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._new_query_btn.clicked.connect(self._on_new_query)
        actions.addWidget(self._new_query_btn)
        ai_layout.addLayout(actions)
        layout.addWidget(self._ai_panel, stretch=1)

        # Results
        self._model = SearchResultModel(self)
        self._list = QListView()
        self._list.setModel(self._model)
        self._list.setItemDelegate(SearchResultDelegate(self))
        self._list.setMouseTracking(True)
        self._list.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self._list.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self._list.clicked.connect(self._on_result_clicked)
        layout.addWidget(self._list, stretch=1)

        self._unsubscribe = self._controller.subscribe(self.render_state)
        self._controller.on_query_changed(self._sync_query)
        self.render_state(self._controller.state)

    # ── Visibility ──

    def toggle_visibility(self) -> None:
        if self.isVisible():
            self.hide()
            return
        self.present()

    def present(self) -> None:
        """Show centered horizontally, a third of the way down the screen."""
        screen = self.screen() or QGuiApplication.primaryScreen()
        if screen is not None:
            geometry = screen.availableGeometry()
            x = geometry.x() + (geometry.width() - WINDOW_WIDTH) // 2
            y = geometry.y() + (geometry.height() - WINDOW_HEIGHT) // 3
            self.move(x, y)
        self.show()
        self.raise_()
        self.activateWindow()
        self._input.setFocus()
        self._input.selectAll()

    def changeEvent(self, event: QEvent) -> None:
        if event.type() == QEvent.Type.ActivationChange and not self.isActiveWindow():
            self._blur_timer.start(_BLUR_HIDE_DELAY_MS)
        super().changeEvent(event)

    def _hide_if_inactive(self) -> None:
        # Focus may have moved to a popup of our own (settings, combo box).
        if self._controller.settings_open or self.isActiveWindow():
            return
        if QGuiApplication.applicationState() == Qt.ApplicationState.ApplicationActive:
            return
        self.hide()

    def dispose(self) -> None:
        self._blur_timer.stop()
        self._unsubscribe()

    # ── Input ──

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is self._input and event.type() == QEvent.Type.KeyPress:
            assert isinstance(event, QKeyEvent)
            key_event = key_event_from_qt(event.key(), event.modifiers())
            if self._controller.handle_key(key_event):
                return True
        return super().eventFilter(watched, event)

    def _sync_query(self, query: str) -> None:
        if self._input.text() != query:
            self._input.setText(query)

    def _on_result_clicked(self, index: QModelIndex) -> None:
        self._controller.activate(index.row())
        self._input.setFocus()

    def _on_new_query(self) -> None:
        self._controller.new_query()
        self._input.setFocus()

    # ── Rendering ──

    def render_state(self, state: SessionState) -> None:
        query = self._controller.query
        match state:
            case Idle():
                self._show_results(())
                self._ai_panel.hide()
                self._status.setText("")
                self._set_compact(True)
            case Loading():
                self._ai_panel.hide()
                self._status.setText(f'Searching for "{query}"...')
                self._set_compact(False)
            case Results(results=results, selected_index=selected):
                self._ai_panel.hide()
                self._show_results(results, selected)
                if results:
                    count = len(results)
                    self._status.setText(f"{count} result{'s' if count != 1 else ''}")
                else:
                    self._status.setText(f'No results for "{query}"')
                self._set_compact(False)
            case Streaming(transcript=transcript, is_complete=complete):
                self._show_results(())
                self._ai_panel.show()
                self._ai_header.setText("🤖 AI Response" if complete else "🤖 Thinking...")
                if transcript:
                    self._ai_view.setHtml(render_transcript(transcript))
                    bar = self._ai_view.verticalScrollBar()
                    if not complete:
                        bar.setValue(bar.maximum())
                else:
                    self._ai_view.setHtml("<i>Waiting for response...</i>")
                self._copy_btn.setVisible(complete and bool(transcript))
                self._new_query_btn.setVisible(complete)
                self._status.setText("")
                self._set_compact(False)
            case Error(message=message):
                self._show_results(())
                self._ai_panel.hide()
                self._status.setText(message)
                self._set_compact(False)

    def _show_results(self, results: tuple[SearchResult, ...], selected: int = 0) -> None:
        self._model.set_results(results)
        self._list.setVisible(bool(results))
        if results:
            index = self._model.index(selected, 0)
            self._list.setCurrentIndex(index)
            self._list.scrollTo(index)

    def _set_compact(self, compact: bool) -> None:
        height = COMPACT_HEIGHT if compact else WINDOW_HEIGHT
        if self.height() != height:
            self.resize(WINDOW_WIDTH, height)
