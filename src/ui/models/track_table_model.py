# ui/track_table_model.py
from __future__ import annotations
from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex

from core.models import Track
from core.utils import fmt_seconds

COLUMNS = ["Title", "Artist", "Duration"]

class TrackTableModel(QAbstractTableModel):
    def __init__(self, tracks=()):
        super().__init__()
        self._tracks: list[Track] = list(tracks)
        self._playing_row: int | None = None

    def set_tracks(self, tracks):
        self.beginResetModel()
        self._tracks = list(tracks)
        self._playing_row = None
        self.endResetModel()

    def set_playing_row(self, row: int | None):
        old = self._playing_row
        self._playing_row = row
        for r in (old, row):
            if r is not None and 0 <= r < len(self._tracks):
                self.dataChanged.emit(self.index(r, 0), self.index(r, len(COLUMNS) - 1))

    def refresh_row(self, row: int):
        if 0 <= row < len(self._tracks):
            self.dataChanged.emit(self.index(row, 0), self.index(row, len(COLUMNS) - 1))

    def rowCount(self, parent=QModelIndex()) -> int:
        return len(self._tracks)

    def columnCount(self, parent=QModelIndex()) -> int:
        return len(COLUMNS)

    def headerData(self, section, orientation, role=Qt.ItemDataRole.DisplayRole):
        if role != Qt.ItemDataRole.DisplayRole or orientation != Qt.Orientation.Horizontal:
            return None
        return COLUMNS[section]

    def data(self, index: QModelIndex, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        track = self._tracks[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0:
                prefix = "▶ " if index.row() == self._playing_row else ""
                return prefix + track.title
            if col == 1:
                return track.artist
            if col == 2:
                return fmt_seconds(track.duration)
        if role == Qt.ItemDataRole.ToolTipRole:
            return track.path
        if role == Qt.ItemDataRole.UserRole:
            return track
        return None

    def track_at(self, row: int) -> Track | None:
        if row < 0 or row >= len(self._tracks):
            return None
        return self._tracks[row]
