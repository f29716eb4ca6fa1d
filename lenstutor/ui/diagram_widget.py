"""Ray-diagram canvas: draws the lens scene and reports clicks in world units."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from PySide6.QtCore import QPointF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QSizePolicy, QWidget

from lenstutor.core.geometry import (
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    LENS_HALF_HEIGHT,
    Point,
    Segment,
    Viewport,
    object_tip,
)
from lenstutor.core.levels import LevelConfig
from lenstutor.core.optics import CONVEX, ImageSolution
from lenstutor.core.rays import Ray, ideal_rays
from lenstutor.core.session import SessionState, current_solution
from lenstutor.core.snap_targets import DISTRACTOR
from lenstutor.ui.colors import DiagramColors

GRID_STEP = 40


class DiagramWidget(QWidget):
    """Fixed-size canvas; all geometry comes from the core, this only paints it."""

    worldClicked = Signal(float, float)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._viewport = Viewport(DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT)
        self._level: Optional[LevelConfig] = None
        self._state: Optional[SessionState] = None
        self.setFixedSize(DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT)
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
        self.setCursor(Qt.CrossCursor)

    def set_scene(self, level: LevelConfig, state: SessionState) -> None:
        self._level = level
        self._state = state
        self.update()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        world = self._viewport.display_to_world(Point(pos.x(), pos.y()))
        self.worldClicked.emit(world.x, world.y)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), QColor("#ffffff"))
        self._draw_grid(painter)
        if self._level is not None and self._state is not None:
            self._draw_base(painter, self._level, self._state)
            self._draw_snap_targets(painter, self._state)
            for ray in self._state.rays:
                self._draw_ray(painter, ray, DiagramColors.LEARNER_RAY)
            if self._state.pending_origin is not None:
                self._draw_dot(painter, self._state.pending_origin, DiagramColors.PENDING_ORIGIN, 6)
            if self._state.show_ideal_solution:
                self._draw_ideal_solution(painter, self._level, self._state)
        painter.end()

    def _to_display(self, point: Point) -> QPointF:
        p = self._viewport.world_to_display(point)
        return QPointF(p.x, p.y)

    def _line(self, painter: QPainter, a: Point, b: Point, color: str, width: float = 2, dashed: bool = False) -> None:
        pen = QPen(QColor(color), width)
        if dashed:
            pen.setStyle(Qt.DashLine)
        painter.setPen(pen)
        painter.drawLine(self._to_display(a), self._to_display(b))

    def _draw_dot(self, painter: QPainter, point: Point, color: str, radius: float) -> None:
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(color))
        painter.drawEllipse(self._to_display(point), radius, radius)
        painter.setBrush(Qt.NoBrush)

    def _draw_grid(self, painter: QPainter) -> None:
        painter.setPen(QPen(QColor(DiagramColors.GRID), 1))
        for x in range(0, self.width() + 1, GRID_STEP):
            painter.drawLine(x, 0, x, self.height())
        for y in range(0, self.height() + 1, GRID_STEP):
            painter.drawLine(0, y, self.width(), y)

    def _draw_base(self, painter: QPainter, level: LevelConfig, state: SessionState) -> None:
        half_w = self._viewport.width / 2
        axis_start = Point(-half_w, 0.0)
        self._line(painter, axis_start, Point(half_w, 0.0), DiagramColors.AXIS)
        start = self._to_display(axis_start)
        painter.drawText(QPointF(start.x() + 10, start.y() - 8), "Principal axis")

        top = Point(0.0, LENS_HALF_HEIGHT)
        self._line(painter, top, Point(0.0, -LENS_HALF_HEIGHT), DiagramColors.LENS, width=4)
        label = "Convex lens" if level.lens == CONVEX else "Concave lens"
        top_px = self._to_display(top)
        painter.drawText(QPointF(top_px.x() + 8, top_px.y() + 14), label)

        f = state.focal_length
        for fx in (f, -f):
            focal = Point(fx, 0.0)
            self._draw_dot(painter, focal, DiagramColors.FOCAL_POINT, 4)
            painter.setPen(QColor(DiagramColors.FOCAL_POINT))
            p = self._to_display(focal)
            painter.drawText(QPointF(p.x() + 7, p.y() - 6), "F")

        tip = object_tip(level.distance_factor, f)
        self._draw_arrow(painter, Point(tip.x, 0.0), tip, DiagramColors.OBJECT)
        tip_px = self._to_display(tip)
        painter.drawText(QPointF(tip_px.x() - 18, tip_px.y() - 14), "Object")

    def _draw_arrow(self, painter: QPainter, base: Point, tip: Point, color: str) -> None:
        self._line(painter, base, tip, color, width=3)
        tip_px = self._to_display(tip)
        # Display y grows downwards, so an upright head opens below its tip.
        direction = 1 if tip.y >= base.y else -1
        head = QPolygonF(
            [
                tip_px,
                QPointF(tip_px.x() - 7, tip_px.y() + direction * 12),
                QPointF(tip_px.x() + 7, tip_px.y() + direction * 12),
            ]
        )
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(color))
        painter.drawPolygon(head)
        painter.setBrush(Qt.NoBrush)
        painter.setPen(QColor(color))

    def _draw_snap_targets(self, painter: QPainter, state: SessionState) -> None:
        for target in state.snap_targets():
            color = DiagramColors.SNAP_DISTRACTOR if target.kind == DISTRACTOR else DiagramColors.SNAP_TRUE
            self._draw_dot(painter, target.point, color, 5)

    def _draw_segments(self, painter: QPainter, segments: Iterable[Segment], color: str, dashed: bool) -> None:
        for segment in segments:
            self._line(painter, segment.a, segment.b, color, dashed=dashed)

    def _draw_ray(self, painter: QPainter, ray: Ray, color: str) -> None:
        self._draw_segments(painter, ray.segments, color, dashed=False)
        self._draw_segments(painter, ray.back_extensions, color, dashed=True)

    def _draw_ideal_solution(self, painter: QPainter, level: LevelConfig, state: SessionState) -> None:
        for ray in ideal_rays(level.lens, state.focal_length, level.distance_factor):
            self._draw_ray(painter, ray, DiagramColors.IDEAL_RAY)
        solution = current_solution(state, level)
        if not isinstance(solution, ImageSolution) or not math.isfinite(solution.x):
            return
        tip = Point(solution.x, solution.y)
        self._draw_arrow(painter, Point(solution.x, 0.0), tip, DiagramColors.IDEAL_RAY)
        tip_px = self._to_display(tip)
        painter.drawText(QPointF(tip_px.x() + 5, tip_px.y() - 5), "Ideal image")
