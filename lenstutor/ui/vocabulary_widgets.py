"""Drag-and-drop vocabulary chips and the zones they are dropped onto."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QMimeData, Qt, Signal
from PySide6.QtGui import QDrag, QDragEnterEvent, QDropEvent, QMouseEvent
from PySide6.QtWidgets import QLabel, QWidget

from lenstutor.ui.colors import HomeColors, blend_hex


class VocabularyChip(QLabel):
    """A term the learner drags onto a drop zone."""

    def __init__(self, term: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(term, parent)
        self._term = term
        self.setAlignment(Qt.AlignCenter)
        self.setCursor(Qt.OpenHandCursor)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {blend_hex(HomeColors.PRIMARY_LIGHT, "#FFFFFF", 0.55)};
                color: {HomeColors.PRIMARY_DARK};
                border: 1px solid {HomeColors.PRIMARY};
                border-radius: 12px;
                padding: 4px 12px;
                font-weight: 700;
            }}
            """
        )

    @property
    def term(self) -> str:
        return self._term

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        mime = QMimeData()
        mime.setText(self._term)
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec(Qt.CopyAction)


class DropZone(QLabel):
    """Accepts one vocabulary term; emits (zone key, term) on drop."""

    termDropped = Signal(str, str)

    def __init__(self, zone_key: str, hint: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._zone_key = zone_key
        self._hint = hint
        self.setAcceptDrops(True)
        self.setWordWrap(True)
        self.setMinimumHeight(44)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {HomeColors.CARD_BG};
                color: {HomeColors.TEXT_SECONDARY};
                border: 2px dashed {HomeColors.TEXT_MUTED};
                border-radius: 8px;
                padding: 6px;
            }}
            """
        )
        self.set_placed("")

    @property
    def zone_key(self) -> str:
        return self._zone_key

    def set_placed(self, term: str) -> None:
        self.setText(f"{self._hint}\n{term}" if term else self._hint)

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        if event.mimeData().hasText():
            event.acceptProposedAction()

    def dropEvent(self, event: QDropEvent) -> None:
        term = event.mimeData().text()
        event.acceptProposedAction()
        self.termDropped.emit(self._zone_key, term)
