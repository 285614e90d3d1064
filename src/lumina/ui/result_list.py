"""List model and delegate for launcher results."""

from __future__ import annotations

from collections.abc import Sequence

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    QPersistentModelIndex,
    QRect,
    QSize,
    Qt,
)
from PySide6.QtGui import QColor, QFont, QPainter
from PySide6.QtWidgets import QStyle, QStyledItemDelegate, QStyleOptionViewItem, QWidget

from lumina.models.search import SearchResult, SearchResultRoles
from lumina.ui.theme import COLORS

_SELECTED_BG = QColor(COLORS["selected_bg"])
_HOVER_BG = QColor(COLORS["hover_bg"])
_BADGE_BG = QColor(COLORS["primary_light"])


class SearchResultModel(QAbstractListModel):
    """Model for launcher results, in the order the search service returned them."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._results: tuple[SearchResult, ...] = ()

    def set_results(self, results: Sequence[SearchResult]) -> None:
        results = tuple(results)
        if results == self._results:
            return
        self.beginResetModel()
        self._results = results
        self.endResetModel()

    def result_at(self, index: int) -> SearchResult | None:
        if 0 <= index < len(self._results):
            return self._results[index]
        return None

    def rowCount(self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()) -> int:
        return len(self._results)

    def data(
        self, index: QModelIndex | QPersistentModelIndex, role: int = Qt.ItemDataRole.DisplayRole
    ) -> object:
        if not index.isValid() or index.row() >= len(self._results):
            return None
        r = self._results[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            return r.title
        if role == SearchResultRoles.ID:
            return r.id
        if role == SearchResultRoles.DESCRIPTION:
            return r.description
        if role == SearchResultRoles.ICON:
            return r.icon or ""
        if role == SearchResultRoles.ACTION_LABEL:
            return r.action_label
        if role == SearchResultRoles.SCORE:
            return r.score
        return None


class SearchResultDelegate(QStyledItemDelegate):
    """Result row: icon, title, description and action badge."""

    def sizeHint(
        self, option: QStyleOptionViewItem, index: QModelIndex | QPersistentModelIndex
    ) -> QSize:
        return QSize(option.rect.width(), 56)

    def paint(
        self,
        painter: QPainter,
        option: QStyleOptionViewItem,
        index: QModelIndex | QPersistentModelIndex,
    ) -> None:
        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        rect = option.rect

        if option.state & QStyle.StateFlag.State_Selected:
            painter.fillRect(rect, _SELECTED_BG)
        elif option.state & QStyle.StateFlag.State_MouseOver:
            painter.fillRect(rect, _HOVER_BG)

        left = rect.left() + 14
        right = rect.right() - 14
        family = painter.font().family()

        icon = str(index.data(SearchResultRoles.ICON) or "")
        if icon:
            painter.setFont(QFont(family, 16))
            painter.drawText(
                QRect(left, rect.top(), 28, rect.height()),
                Qt.AlignmentFlag.AlignCenter,
                icon,
            )
            left += 38

        badge = str(index.data(SearchResultRoles.ACTION_LABEL) or "")
        painter.setFont(QFont(family, 9, QFont.Weight.DemiBold))
        badge_width = painter.fontMetrics().horizontalAdvance(badge) + 16
        badge_top = rect.top() + (rect.height() - 20) // 2
        badge_rect = QRect(right - badge_width, badge_top, badge_width, 20)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(_BADGE_BG)
        painter.drawRoundedRect(badge_rect, 10, 10)
        painter.setPen(QColor(COLORS["primary"]))
        painter.drawText(badge_rect, Qt.AlignmentFlag.AlignCenter, badge)

        text_width = max(0, badge_rect.left() - left - 12)
        title = str(index.data(Qt.ItemDataRole.DisplayRole) or "")
        painter.setPen(QColor(COLORS["text"]))
        painter.setFont(QFont(family, 12, QFont.Weight.DemiBold))
        painter.drawText(
            QRect(left, rect.top() + 8, text_width, 20),
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            painter.fontMetrics().elidedText(title, Qt.TextElideMode.ElideRight, text_width),
        )

        description = str(index.data(SearchResultRoles.DESCRIPTION) or "")
        painter.setPen(QColor(COLORS["text_muted"]))
        painter.setFont(QFont(family, 10))
        painter.drawText(
            QRect(left, rect.top() + 29, text_width, 18),
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            painter.fontMetrics().elidedText(description, Qt.TextElideMode.ElideMiddle, text_width),
        )
        painter.restore()
