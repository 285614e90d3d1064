"""Settings dialog — edits the persisted settings record."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from lumina.core.navigation import Key, KeyEvent
from lumina.models.settings import AI_SERVICES, SUGGESTED_MODELS, Settings
from lumina.ui.async_bridge import async_slot

if TYPE_CHECKING:
    from lumina.core.controller import QuerySessionController


def settings_from_form(
    base: Settings,
    *,
    ai_service: str,
    openrouter_api_key: str,
    openai_api_key: str,
    default_model: str,
    directories_text: str,
) -> Settings:
    """Build a new settings record from raw form values."""
    directories = [line.strip() for line in directories_text.splitlines() if line.strip()]
    return base.model_copy(
        update={
            "ai_service": ai_service,
            "openrouter_api_key": openrouter_api_key.strip() or None,
            "openai_api_key": openai_api_key.strip() or None,
            "default_model": default_model.strip() or base.default_model,
            "search_directories": directories,
        }
    )


class SettingsDialog(QDialog):
    """Form over :class:`Settings`; saving goes through the controller."""

    def __init__(self, controller: QuerySessionController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._base = controller.settings or Settings()
        self.setWindowTitle("Lumina Settings")
        self.setMinimumWidth(480)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self._service = QComboBox()
        self._service.addItems(list(AI_SERVICES))
        self._service.setCurrentText(self._base.ai_service)
        form.addRow("AI service", self._service)

        self._openrouter_key = QLineEdit(self._base.openrouter_api_key or "")
        self._openrouter_key.setEchoMode(QLineEdit.EchoMode.Password)
        self._openrouter_key.setPlaceholderText("Enter your OpenRouter API key")
        form.addRow("OpenRouter API key", self._openrouter_key)

        self._openai_key = QLineEdit(self._base.openai_api_key or "")
        self._openai_key.setEchoMode(QLineEdit.EchoMode.Password)
        self._openai_key.setPlaceholderText("Enter your OpenAI API key")
        form.addRow("OpenAI API key", self._openai_key)

        self._model = QComboBox()
        self._model.setEditable(True)
        for model_id, label in SUGGESTED_MODELS:
            self._model.addItem(label, model_id)
        self._model.setCurrentIndex(self._model.findData(self._base.default_model))
        if self._model.currentIndex() < 0:
            self._model.setEditText(self._base.default_model)
        form.addRow("Default model", self._model)

        self._directories = QPlainTextEdit("\n".join(self._base.search_directories))
        self._directories.setPlaceholderText("One directory per line")
        form.addRow("Search directories", self._directories)
        layout.addLayout(form)

        hint = QLabel('Get an API key from <a href="https://openrouter.ai">openrouter.ai</a>')
        hint.setTextFormat(Qt.TextFormat.RichText)
        hint.setOpenExternalLinks(True)
        layout.addWidget(hint)

        self._error = QLabel("")
        self._error.setStyleSheet("color: #E74C3C;")
        layout.addWidget(self._error)

        buttons = QHBoxLayout()
        buttons.addStretch()
        back = QPushButton("← Back")
        back.clicked.connect(self.reject)
        buttons.addWidget(back)
        save = QPushButton("Save Settings")
        save.setObjectName("PrimaryButton")
        save.clicked.connect(self._on_save)
        buttons.addWidget(save)
        layout.addLayout(buttons)

        self.finished.connect(lambda _code: self._controller.close_settings())

    def keyPressEvent(self, event: QKeyEvent) -> None:
        # Escape resets the whole session, not only this view.
        if event.key() == Qt.Key.Key_Escape:
            self._controller.handle_key(KeyEvent(Key.ESCAPE))
            return
        super().keyPressEvent(event)

    def _selected_model(self) -> str:
        index = self._model.findText(self._model.currentText())
        if index >= 0:
            return str(self._model.itemData(index))
        return self._model.currentText()

    @async_slot
    async def _on_save(self) -> None:
        settings = settings_from_form(
            self._base,
            ai_service=self._service.currentText(),
            openrouter_api_key=self._openrouter_key.text(),
            openai_api_key=self._openai_key.text(),
            default_model=self._selected_model(),
            directories_text=self._directories.toPlainText(),
        )
        if await self._controller.save_settings(settings):
            # Saving closes settings mode, which may already have closed us.
            if self.isVisible():
                self.accept()
        else:
            self._error.setText("Could not save settings. Check terminal logs.")
