from __future__ import annotations

import os
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QColor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QDoubleSpinBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from lenstutor.core.geometry import MIN_FOCAL_LENGTH, Point, max_focal_length
from lenstutor.core.levels import LevelConfig, LevelRepository
from lenstutor.core.misconceptions import CLASSIFICATION_OPTIONS, VOCABULARY_TERMS
from lenstutor.core.progress import ProgressStore
from lenstutor.core.session import (
    ERROR,
    FREE,
    GUIDED,
    SUCCESS,
    UNLOCKED,
    SessionState,
    Transition,
    apply_classification,
    apply_click,
    apply_explanation,
    apply_focal_length_change,
    apply_level_change,
    apply_mode_change,
    apply_reset,
    apply_submit,
    apply_vocabulary_drop,
    new_session,
    scenario_summary,
)
from lenstutor.ui.colors import HomeColors, blend_hex
from lenstutor.ui.diagram_widget import DiagramWidget
from lenstutor.ui.models import build_level_states
from lenstutor.ui.vocabulary_widgets import DropZone, VocabularyChip

DROP_ZONE_HINTS = {
    "Principal axis": "Drop label near principal axis marker",
    "Focal point": "Drop label near right focal point marker",
    "Focal length": "Drop label on distance between lens and F",
}


class MainWindow(QMainWindow):
    """Single-screen tutor: diagram canvas on the left, task panels on the right.

    Every widget signal is turned into one session transition; the window
    then adopts the returned state and repaints.
    """

    def __init__(self, levels: LevelRepository, progress_store: ProgressStore) -> None:
        super().__init__()
        self._levels_repo = levels
        self._progress_store = progress_store
        self._max_focal_length = max_focal_length(level.distance_factor for level in levels.all())
        unlock_all = os.environ.get("LENSTUTOR_UNLOCK_ALL") == "1"
        self._state: SessionState = new_session(
            progress_store.load(), len(levels), unlock_all=unlock_all
        )
        # Widget signals fire while the UI is built; _refresh clears this.
        self._syncing = True

        self._level_combo: Optional[QComboBox] = None
        self._mode_combo: Optional[QComboBox] = None
        self._focal_spin: Optional[QDoubleSpinBox] = None
        self._summary_label: Optional[QLabel] = None
        self._steps_list: Optional[QListWidget] = None
        self._diagram: Optional[DiagramWidget] = None
        self._drop_zones: dict[str, DropZone] = {}
        self._classification_combo: Optional[QComboBox] = None
        self._explanation_edit: Optional[QPlainTextEdit] = None
        self._feedback_label: Optional[QLabel] = None
        self._progress_label: Optional[QLabel] = None

        self.setWindowTitle("Lens Ray Diagram Tutor")
        self._build_ui()
        self._refresh()

    # ------------------------------------------------------------------
    # layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QWidget()
        root.setStyleSheet(
            f"""
            QWidget {{ color: {HomeColors.TEXT_PRIMARY}; }}
            QFrame#panel {{
                background: {HomeColors.CARD_BG};
                border: 1px solid {blend_hex(HomeColors.PRIMARY_LIGHT, "#FFFFFF", 0.6)};
                border-radius: 12px;
            }}
            """
        )
        outer = QHBoxLayout(root)
        outer.setContentsMargins(16, 16, 16, 16)
        outer.setSpacing(16)

        left = QVBoxLayout()
        left.addWidget(self._build_controls())
        self._summary_label = QLabel("")
        self._summary_label.setWordWrap(True)
        left.addWidget(self._summary_label)
        self._diagram = DiagramWidget()
        self._diagram.worldClicked.connect(self._on_canvas_click)
        left.addWidget(self._diagram, 0, Qt.AlignHCenter)
        self._feedback_label = QLabel("")
        self._feedback_label.setWordWrap(True)
        left.addWidget(self._feedback_label)
        left.addStretch(1)
        outer.addLayout(left, 3)

        right = QVBoxLayout()
        right.addWidget(self._build_steps_panel())
        right.addWidget(self._build_vocabulary_panel())
        right.addWidget(self._build_answer_panel())
        self._progress_label = QLabel("")
        right.addWidget(self._progress_label)
        right.addStretch(1)
        outer.addLayout(right, 2)

        self.setCentralWidget(root)

    def _panel(self, title: str) -> tuple[QFrame, QVBoxLayout]:
        frame = QFrame()
        frame.setObjectName("panel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 10, 12, 12)
        heading = QLabel(title)
        heading.setStyleSheet(f"font-weight: 800; color: {HomeColors.PRIMARY_DARK};")
        layout.addWidget(heading)
        return frame, layout

    def _build_controls(self) -> QWidget:
        bar = QWidget()
        grid = QGridLayout(bar)
        grid.setContentsMargins(0, 0, 0, 0)

        self._level_combo = QComboBox()
        self._level_combo.currentIndexChanged.connect(self._on_level_selected)
        self._mode_combo = QComboBox()
        self._mode_combo.addItem("Guided", GUIDED)
        self._mode_combo.addItem("Free", FREE)
        self._mode_combo.currentIndexChanged.connect(self._on_mode_selected)
        self._focal_spin = QDoubleSpinBox()
        self._focal_spin.setRange(MIN_FOCAL_LENGTH, self._max_focal_length)
        self._focal_spin.setSingleStep(10.0)
        self._focal_spin.setKeyboardTracking(False)
        self._focal_spin.valueChanged.connect(self._on_focal_length_changed)

        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(lambda: self._apply(apply_reset(self._state)))
        submit_button = QPushButton("Submit")
        submit_button.clicked.connect(self._on_submit)

        grid.addWidget(QLabel("Level"), 0, 0)
        grid.addWidget(self._level_combo, 0, 1)
        grid.addWidget(QLabel("Mode"), 0, 2)
        grid.addWidget(self._mode_combo, 0, 3)
        grid.addWidget(QLabel("Focal length"), 0, 4)
        grid.addWidget(self._focal_spin, 0, 5)
        grid.addWidget(reset_button, 0, 6)
        grid.addWidget(submit_button, 0, 7)
        return bar

    def _build_steps_panel(self) -> QWidget:
        frame, layout = self._panel("Steps")
        self._steps_list = QListWidget()
        self._steps_list.setSelectionMode(QAbstractItemView.NoSelection)
        layout.addWidget(self._steps_list)
        return frame

    def _build_vocabulary_panel(self) -> QWidget:
        frame, layout = self._panel("Vocabulary")
        bank = QHBoxLayout()
        for term in VOCABULARY_TERMS:
            bank.addWidget(VocabularyChip(term))
        layout.addLayout(bank)
        for zone_key in VOCABULARY_TERMS:
            zone = DropZone(zone_key, DROP_ZONE_HINTS[zone_key])
            zone.termDropped.connect(self._on_term_dropped)
            self._drop_zones[zone_key] = zone
            layout.addWidget(zone)
        return frame

    def _build_answer_panel(self) -> QWidget:
        frame, layout = self._panel("Your answer")
        self._classification_combo = QComboBox()
        self._classification_combo.addItem("Select image classification", "")
        for option in CLASSIFICATION_OPTIONS:
            self._classification_combo.addItem(option, option)
        self._classification_combo.currentIndexChanged.connect(self._on_classification_selected)
        layout.addWidget(self._classification_combo)
        self._explanation_edit = QPlainTextEdit()
        self._explanation_edit.setPlaceholderText("Explain how the rays locate the image...")
        self._explanation_edit.textChanged.connect(self._on_explanation_changed)
        layout.addWidget(self._explanation_edit)
        return frame

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    def _current_level(self) -> LevelConfig:
        return self._levels_repo.get(self._state.current_level)

    def _apply(self, transition: Transition) -> None:
        self._state = transition.state
        for event in transition.events:
            if event.kind == UNLOCKED:
                self._progress_store.save(self._state.unlocked_level)
            else:
                self._show_feedback(event.message, event.kind)
        self._refresh()

    def _show_feedback(self, message: str, kind: str) -> None:
        color = {ERROR: HomeColors.ERROR, SUCCESS: HomeColors.SUCCESS}.get(kind, HomeColors.TEXT_SECONDARY)
        self._feedback_label.setStyleSheet(f"color: {color};")
        self._feedback_label.setText(message)

    def _on_canvas_click(self, x: float, y: float) -> None:
        self._apply(apply_click(self._state, self._current_level(), Point(x, y)))

    def _on_level_selected(self, index: int) -> None:
        if self._syncing or index < 0:
            return
        level_id = self._level_combo.itemData(index)
        self._show_feedback("", "")
        self._apply(apply_level_change(self._state, level_id, len(self._levels_repo)))

    def _on_mode_selected(self, index: int) -> None:
        if not self._syncing:
            self._apply(apply_mode_change(self._state, self._mode_combo.itemData(index)))

    def _on_focal_length_changed(self, value: float) -> None:
        if not self._syncing:
            self._show_feedback("", "")
            self._apply(apply_focal_length_change(self._state, value, self._max_focal_length))

    def _on_term_dropped(self, zone_key: str, term: str) -> None:
        self._apply(apply_vocabulary_drop(self._state, zone_key, term))

    def _on_classification_selected(self, index: int) -> None:
        if not self._syncing:
            self._apply(apply_classification(self._state, self._classification_combo.itemData(index)))

    def _on_explanation_changed(self) -> None:
        if not self._syncing:
            self._apply(apply_explanation(self._state, self._explanation_edit.toPlainText()))

    def _on_submit(self) -> None:
        self._apply(apply_submit(self._state, self._current_level(), len(self._levels_repo)))

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        """Push the session state into every widget without re-triggering signals."""
        state = self._state
        level = self._current_level()
        self._syncing = True
        try:
            self._level_combo.clear()
            for level_state in build_level_states(self._levels_repo.all(), state):
                self._level_combo.addItem(level_state.label, level_state.level.id)
                item = self._level_combo.model().item(self._level_combo.count() - 1)
                item.setEnabled(level_state.unlocked)
                if level_state.is_current:
                    self._level_combo.setCurrentIndex(self._level_combo.count() - 1)
            self._mode_combo.setCurrentIndex(self._mode_combo.findData(state.mode))
            self._focal_spin.setValue(state.focal_length)
            self._classification_combo.setCurrentIndex(
                max(0, self._classification_combo.findData(state.classification))
            )
            if self._explanation_edit.toPlainText() != state.explanation:
                self._explanation_edit.setPlainText(state.explanation)
        finally:
            self._syncing = False

        self._summary_label.setText(scenario_summary(level, state.focal_length))
        self._steps_list.clear()
        highlight = blend_hex(HomeColors.PRIMARY_LIGHT, "#FFFFFF", 0.5)
        for idx, step in enumerate(level.guided_steps):
            item = QListWidgetItem(f"{idx + 1}. {step}")
            if state.mode == GUIDED and idx == state.guided_step_index:
                item.setBackground(QColor(highlight))
            self._steps_list.addItem(item)
        for zone_key, zone in self._drop_zones.items():
            zone.set_placed(state.vocabulary_placements.get(zone_key, ""))
        self._progress_label.setText(f"Unlocked up to Level {state.unlocked_level}.")
        self._diagram.set_scene(level, state)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._progress_store.save(self._state.unlocked_level)
        super().closeEvent(event)
