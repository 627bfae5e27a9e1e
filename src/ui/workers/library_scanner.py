# ui/workers/library_scanner.py
import threading

from PySide6.QtCore import QThread, Signal

from core.errors import ScanCancelled
from library.scan_library import AUDIO_EXTS, scan


class LibraryScanner(QThread):
    # every signal carries the generation the worker was started with
    progress_signal = Signal(int, int)          # generation, tracks found so far
    tracks_signal = Signal(int, list)           # generation, list[Track]
    finished_signal = Signal(int, bool, str)    # generation, ok, message

    def __init__(self, directories: list[str], extensions=AUDIO_EXTS, sort: bool = True, generation: int = 0):
        super().__init__()
        self.directories = list(directories)
        self.extensions = tuple(extensions)
        self.sort = sort
        self.generation = generation
        self._cancel = threading.Event()
        self._found = 0

    def cancel(self):
        self._cancel.set()

    def _on_track(self, _track):
        self._found += 1
        if self._found % 50 == 0:
            self.progress_signal.emit(self.generation, self._found)

    def run(self):
        self._found = 0
        try:
            tracks = scan(
                self.directories,
                extensions=self.extensions,
                cancel=self._cancel,
                sort=self.sort,
                on_track=self._on_track,
            )
        except ScanCancelled:
            self.finished_signal.emit(self.generation, False, "Scan cancelled")
            return
        except Exception as e:
            self.finished_signal.emit(self.generation, False, f"Scan failed: {e}")
            return

        self.progress_signal.emit(self.generation, len(tracks))
        self.tracks_signal.emit(self.generation, tracks)
        self.finished_signal.emit(self.generation, True, f"Found {len(tracks)} track(s)")
