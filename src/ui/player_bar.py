# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import Qt, QSize, QByteArray
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtSvg import QSvgRenderer
from PySide6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QLabel, QToolButton, QSlider

from core.errors import EngineLoadFailure
from core.models import PlayerStatus, UNKNOWN_ARTIST
from core.utils import fmt_ms


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.GlobalColor.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PREV = "M6 18V6h2v12H6zm3.5-6L18 6v12l-8.5-6z"
SVG_NEXT = "M16 6v12h2V6h-2zM6 18l8.5-6L6 6v12z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"


class PlayerBar(QWidget):
    """Now-playing strip: title/artist, seek slider, prev / play-pause / next."""

    def __init__(self, controller, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.state = controller.state

        self._dragging = False

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 8, 12, 8)
        root.setSpacing(4)

        # --- labels ---
        self.lbl_title = QLabel("")
        self.lbl_title.setObjectName("NowPlaying")
        self.lbl_title.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self.lbl_artist = QLabel(UNKNOWN_ARTIST)
        self.lbl_artist.setObjectName("Artist")

        # --- slider row ---
        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setSingleStep(1000)
        self.slider.setPageStep(5000)

        self.lbl_time = QLabel("0:00")
        self.lbl_dur = QLabel("0:00")

        time_row = QHBoxLayout()
        time_row.addWidget(self.lbl_time)
        time_row.addWidget(self.slider, 1)
        time_row.addWidget(self.lbl_dur)

        # --- buttons ---
        self.btn_prev = self._button("BtnPrev", SVG_PREV, 20, "Previous")
        self.btn_play = self._button("BtnPlay", SVG_PLAY, 22, "Play")
        self.btn_next = self._button("BtnNext", SVG_NEXT, 20, "Next")

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self.btn_prev)
        buttons.addWidget(self.btn_play)
        buttons.addWidget(self.btn_next)
        buttons.addStretch(1)

        root.addWidget(self.lbl_title)
        root.addWidget(self.lbl_artist)
        root.addLayout(time_row)
        root.addLayout(buttons)

        # --- signals ---
        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self.slider.sliderMoved.connect(self._on_slider_moved)

        self.btn_prev.clicked.connect(self.play_previous)
        self.btn_next.clicked.connect(self.play_next)
        self.btn_play.clicked.connect(self.toggle_play)

        self.state.currentChanged.connect(self._on_current_changed)
        self.state.playingChanged.connect(self._set_playing)
        self.state.statusChanged.connect(self._on_status_changed)
        self.state.positionChanged.connect(self._on_position)
        self.state.durationChanged.connect(self._on_duration)

        self.setObjectName("PlayerBar")
        self._apply_styles()
        self._on_current_changed(self.state.current_index)

    def _button(self, name: str, svg: str, size: int, tip: str) -> QToolButton:
        btn = QToolButton()
        btn.setObjectName(name)
        btn.setIcon(_svg_icon(svg, size))
        btn.setIconSize(QSize(size, size))
        btn.setToolTip(tip)
        return btn

    # --- transport ---
    # A rejected file is already reported through controller.playFailed.
    def play_previous(self):
        try:
            self.controller.previous()
        except EngineLoadFailure:
            pass

    def play_next(self):
        try:
            self.controller.next()
        except EngineLoadFailure:
            pass

    def toggle_play(self):
        try:
            self.controller.toggle_play_pause()
        except EngineLoadFailure:
            pass

    # --- slider handling ---
    def _on_slider_pressed(self):
        self._dragging = True

    def _on_slider_moved(self, value: int):
        # preview time while dragging
        self.lbl_time.setText(fmt_ms(value))

    def _on_slider_released(self):
        self._dragging = False
        self.controller.seek(int(self.slider.value()))

    # --- state updates ---
    def _on_current_changed(self, _index):
        track = self.state.current_track
        self.setVisible(track is not None)
        if track is None:
            self.lbl_title.setText("")
            self.slider.setValue(0)
            self.lbl_time.setText("0:00")
            self.lbl_dur.setText("0:00")
            self._set_playing(False)
            return
        self.lbl_title.setText(track.title)
        self.lbl_artist.setText(track.artist or UNKNOWN_ARTIST)

    def _on_status_changed(self, status):
        self.btn_play.setEnabled(status != PlayerStatus.LOADING)

    def _set_playing(self, playing: bool):
        if playing:
            self.btn_play.setIcon(_svg_icon(SVG_PAUSE, 22))
            self.btn_play.setToolTip("Pause")
        else:
            self.btn_play.setIcon(_svg_icon(SVG_PLAY, 22))
            self.btn_play.setToolTip("Play")

    def _on_duration(self, ms: int):
        self.slider.setRange(0, max(0, int(ms)))
        self.lbl_dur.setText(fmt_ms(ms))

    def _on_position(self, ms: int):
        if self._dragging:
            return
        self.lbl_time.setText(fmt_ms(ms))
        self.slider.setValue(int(ms))

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#PlayerBar {
            background-color: #111827;
            border-top: 1px solid #1f2937;
        }

        QToolButton {
            border: 1px solid transparent;
            background: transparent;
            padding: 6px;
            border-radius: 10px;
        }
        QToolButton:hover {
            background: #0b1222;
            border-color: #1f2937;
        }

        QToolButton#BtnPlay {
            background: #020617;
            border: 1px solid #1f2937;
            border-radius: 999px;
            padding: 8px;
        }
        QToolButton#BtnPlay:hover { border-color: #38bdf8; }

        QSlider::groove:horizontal {
            height: 4px;
            background: #0f172a;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            width: 12px;
            height: 12px;
            margin: -4px 0;
            border-radius: 6px;
            background: #38bdf8;
        }
        QSlider::sub-page:horizontal {
            background: #38bdf8;
            border-radius: 2px;
        }

        QLabel { color: #9ca3af; font-size: 11px; }
        QLabel#NowPlaying { color: #e5e7eb; font-size: 14px; font-weight: bold; }
        QLabel#Artist { color: #9ca3af; font-size: 12px; }
        """)
