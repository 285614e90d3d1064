"""Single-instance guard; a second launch can toggle the running window."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject
from PySide6.QtNetwork import QLocalServer, QLocalSocket

from lumina.core import events
from lumina.core.events import EventBus

logger = logging.getLogger(__name__)

TOGGLE_MESSAGE = b"toggle"
PING_MESSAGE = b"ping"
_CONNECT_TIMEOUT_MS = 500


def send_to_running_instance(name: str, message: bytes = TOGGLE_MESSAGE) -> bool:
    """Deliver ``message`` to a running instance. False if none is listening."""
    socket = QLocalSocket()
    socket.connectToServer(name)
    if not socket.waitForConnected(_CONNECT_TIMEOUT_MS):
        return False
    socket.write(message)
    socket.flush()
    socket.waitForBytesWritten(_CONNECT_TIMEOUT_MS)
    socket.disconnectFromServer()
    return True


class InstanceServer(QObject):
    """Listens for other launches and turns their messages into bus events."""

    def __init__(self, name: str, bus: EventBus, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._name = name
        self._bus = bus
        self._server = QLocalServer(self)
        self._server.newConnection.connect(self._on_new_connection)

    def listen(self) -> bool:
        if self._server.listen(self._name):
            return True
        # A crashed instance can leave a stale socket behind.
        QLocalServer.removeServer(self._name)
        if self._server.listen(self._name):
            return True
        logger.warning("Could not listen on %s: %s", self._name, self._server.errorString())
        return False

    def close(self) -> None:
        self._server.close()

    def _on_new_connection(self) -> None:
        socket = self._server.nextPendingConnection()
        if socket is None:
            return
        socket.readyRead.connect(lambda: self._on_ready_read(socket))
        socket.disconnected.connect(socket.deleteLater)

    def _on_ready_read(self, socket: QLocalSocket) -> None:
        message = bytes(socket.readAll().data()).strip()
        if message == TOGGLE_MESSAGE:
            self._bus.emit(events.TOGGLE_WINDOW_EVENT)
        elif message == PING_MESSAGE:
            logger.info("Another launch found this instance already running")
        else:
            logger.debug("Ignoring unknown instance message %r", message)
