"""PySide6 application bootstrap — service init, launcher window, run_app()."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import QApplication

from lumina.core.controller import QuerySessionController
from lumina.core.events import EventBus
from lumina.services.container import ServiceContainer
from lumina.ui.async_bridge import cancel_all_tasks, create_event_loop, schedule
from lumina.ui.launcher_window import LauncherWindow
from lumina.ui.settings_dialog import SettingsDialog
from lumina.ui.single_instance import (
    PING_MESSAGE,
    TOGGLE_MESSAGE,
    InstanceServer,
    send_to_running_instance,
)
from lumina.ui.theme import build_stylesheet

if TYPE_CHECKING:
    from lumina.config import Config

logger = logging.getLogger(__name__)


class LauncherApp:
    """Owns the services, the session controller and the launcher window."""

    def __init__(self, config: Config, bus: EventBus, *, show: bool = True) -> None:
        self._config = config
        self._bus = bus
        self._show = show
        self._services: ServiceContainer | None = None
        self._controller: QuerySessionController | None = None
        self._window: LauncherWindow | None = None
        self._settings_dialog: SettingsDialog | None = None
        self._shutdown_in_progress = False

    @property
    def controller(self) -> QuerySessionController | None:
        return self._controller

    @property
    def window(self) -> LauncherWindow | None:
        return self._window

    async def initialize(self) -> None:
        """Build services, wire the controller to the window and show it."""
        logger.info("Starting Lumina, building service container...")
        self._services = await ServiceContainer.create(self._config, self._bus)
        self._controller = QuerySessionController(self._services, self._bus, self._config)
        self._window = LauncherWindow(self._controller)
        self._controller.on_toggle_window = self._window.toggle_visibility
        self._controller.on_settings_toggled(self._on_settings_toggled)
        QShortcut(QKeySequence("Ctrl+Q"), self._window, self.quit)
        if self._show:
            self._window.present()

        try:
            await self._controller.start()
        except Exception:
            logger.exception("Application startup failed")
            self._controller.report_error("Startup failed. Check terminal logs.")

    def _on_settings_toggled(self, is_open: bool) -> None:
        if self._controller is None:
            return
        if is_open and self._settings_dialog is None:
            self._settings_dialog = SettingsDialog(self._controller, self._window)
            self._settings_dialog.finished.connect(self._on_settings_finished)
            self._settings_dialog.show()
        elif not is_open and self._settings_dialog is not None:
            self._settings_dialog.close()

    def _on_settings_finished(self, _code: int) -> None:
        if self._settings_dialog is not None:
            self._settings_dialog.deleteLater()
            self._settings_dialog = None
        if self._window is not None:
            self._window.present()

    def quit(self) -> None:
        if self._shutdown_in_progress:
            return
        self._shutdown_in_progress = True
        schedule(self._shutdown_and_quit())

    async def _shutdown_and_quit(self) -> None:
        """Best-effort cleanup before quitting the Qt app."""
        try:
            cancel_all_tasks()
            if self._controller is not None:
                self._controller.stop()
            if self._window is not None:
                self._window.dispose()
            if self._services is not None:
                await self._services.close()
                self._services = None
        except Exception:
            logger.exception("Error while shutting down services")
        finally:
            app = QApplication.instance()
            if app is not None:
                app.quit()


def run_app(config: Config, *, toggle: bool = False, verbose: bool = False) -> None:
    """Entry point: create QApplication, event loop, launcher and run.

    Only one instance runs per user. A later launch hands over to the running
    one (asking it to show or hide its window when ``toggle`` is set) and returns.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Lumina")
    app.setOrganizationName("Lumina")
    app.setQuitOnLastWindowClosed(False)

    message = TOGGLE_MESSAGE if toggle else PING_MESSAGE
    if send_to_running_instance(config.instance_name, message):
        if not toggle:
            logger.info("Lumina is already running; use --toggle to show it")
        return

    app.setStyleSheet(build_stylesheet())
    loop = create_event_loop(app)

    bus = EventBus()
    server = InstanceServer(config.instance_name, bus)
    server.listen()

    launcher = LauncherApp(config, bus)
    schedule(launcher.initialize())

    with loop:
        loop.run_forever()
    server.close()
