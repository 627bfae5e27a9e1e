"""Tests for the library scanner: filtering, titles, isolation and ordering."""

import os
import threading
from pathlib import Path

import pytest

from conftest import write_file
from core.errors import DirectoryUnavailable, FileMetadataUnreadable, ScanCancelled
from core.models import Track, UNKNOWN_ARTIST
from library import scan_library
from library.scan_library import (
    is_audio_path,
    is_excluded,
    iter_audio_paths,
    new_track_from_path,
    scan,
    title_from_path,
)


class TestFilters:

    def test_audio_extension_is_case_insensitive(self):
        assert is_audio_path("/m/a.mp3")
        assert is_audio_path("/m/a.MP3")
        assert not is_audio_path("/m/a.flac")
        assert not is_audio_path("/m/mp3")

    def test_custom_extensions(self):
        assert is_audio_path("/m/a.flac", (".mp3", ".flac"))

    @pytest.mark.parametrize("path", [
        "/sdcard/WhatsApp/Media/AUD-20240101-WA0001.mp3",
        "/sdcard/Download/Slack/clip.mp3",
        "/sdcard/Ringtones/beep.mp3",
        "/sdcard/Music/my RINGTONE mix.mp3",
    ])
    def test_excluded_markers(self, path):
        assert is_excluded(path)

    def test_case_sensitive_markers_only_match_exact_case(self):
        assert not is_excluded("/music/aud-notes/song.mp3")
        assert not is_excluded("/music/slack-key guitar/song.mp3")

    def test_plain_path_not_excluded(self):
        assert not is_excluded("/music/Artist/Album/01 Song.mp3")


class TestTitles:

    def test_title_strips_last_extension(self):
        assert title_from_path("/music/My Song.mp3") == "My Song"

    def test_title_keeps_inner_dots(self):
        assert title_from_path("/music/a.b.c.mp3") == "a.b.c"

    def test_mixed_case_extension(self, tmp_path: Path):
        write_file(tmp_path / "track.MP3")

        tracks = scan([str(tmp_path)])

        assert [t.title for t in tracks] == ["track"]

    def test_new_track_fields(self, tmp_path: Path):
        p = write_file(tmp_path / "My Song.mp3")

        track = new_track_from_path(str(p))

        assert track == Track(title="My Song", path=os.path.abspath(str(p)), artist=UNKNOWN_ARTIST)
        assert track.duration is None

    def test_new_track_empty_file(self, tmp_path: Path):
        p = write_file(tmp_path / "empty.mp3", b"")
        assert new_track_from_path(str(p)) is None

    def test_new_track_missing_file(self, tmp_path: Path):
        with pytest.raises(FileMetadataUnreadable):
            new_track_from_path(str(tmp_path / "gone.mp3"))


class TestScan:

    def test_only_allowlisted_nonempty_unexcluded_files(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")
        write_file(tmp_path / "sub" / "b.mp3")
        write_file(tmp_path / "sub" / "deeper" / "c.mp3")
        write_file(tmp_path / "notes.txt")
        write_file(tmp_path / "cover.jpg")
        write_file(tmp_path / "song.flac")
        write_file(tmp_path / "empty.mp3", b"")
        write_file(tmp_path / "WhatsApp" / "AUD-0001.mp3")
        write_file(tmp_path / "Slack" / "huddle.mp3")
        write_file(tmp_path / "Ringtones" / "ring.mp3")

        tracks = scan([str(tmp_path)])

        names = sorted(os.path.basename(t.path) for t in tracks)
        assert names == ["a.mp3", "b.mp3", "c.mp3"]
        for t in tracks:
            assert t.path.lower().endswith(".mp3")
            assert not is_excluded(t.path)
            assert os.path.getsize(t.path) > 0

    def test_extension_allowlist_is_configurable(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")
        write_file(tmp_path / "b.flac")

        tracks = scan([str(tmp_path)], extensions=(".flac",))

        assert [t.title for t in tracks] == ["b"]

    def test_sorted_order(self, tmp_path: Path):
        write_file(tmp_path / "b" / "2.mp3")
        write_file(tmp_path / "b" / "1.mp3")
        write_file(tmp_path / "a" / "z.mp3")
        write_file(tmp_path / "c.mp3")

        tracks = scan([str(tmp_path)])

        rel = [os.path.relpath(t.path, tmp_path) for t in tracks]
        assert rel == ["c.mp3", os.path.join("a", "z.mp3"), os.path.join("b", "1.mp3"), os.path.join("b", "2.mp3")]

    def test_roots_keep_caller_order(self, tmp_path: Path):
        write_file(tmp_path / "r1" / "x.mp3")
        write_file(tmp_path / "r2" / "a.mp3")

        tracks = scan([str(tmp_path / "r2"), str(tmp_path / "r1")])

        assert [t.title for t in tracks] == ["a", "x"]

    def test_duplicate_roots_scanned_once(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")

        tracks = scan([str(tmp_path), str(tmp_path) + os.sep])

        assert len(tracks) == 1

    def test_missing_root_is_skipped(self, tmp_path: Path):
        write_file(tmp_path / "real" / "a.mp3")

        tracks = scan([str(tmp_path / "missing"), str(tmp_path / "real")])

        assert [t.title for t in tracks] == ["a"]

    def test_root_that_is_a_file_is_skipped(self, tmp_path: Path):
        f = write_file(tmp_path / "a.mp3")
        assert scan([str(f)]) == []

    def test_iter_audio_paths_missing_root_raises(self, tmp_path: Path):
        with pytest.raises(DirectoryUnavailable):
            list(iter_audio_paths(str(tmp_path / "missing")))

    def test_unreadable_subdirectory_does_not_hide_other_files(self, tmp_path: Path, monkeypatch):
        for i in range(3):
            write_file(tmp_path / f"ok{i}.mp3")
        write_file(tmp_path / "more" / "ok3.mp3")
        locked = tmp_path / "locked"
        write_file(locked / "hidden.mp3")

        real_scandir = os.scandir

        def fake_scandir(path="."):
            if os.path.normpath(os.fspath(path)) == os.path.normpath(str(locked)):
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

        tracks = scan([str(tmp_path)])

        assert sorted(t.title for t in tracks) == ["ok0", "ok1", "ok2", "ok3"]

    def test_unreadable_root_is_skipped(self, tmp_path: Path, monkeypatch):
        bad = tmp_path / "bad"
        write_file(bad / "a.mp3")
        good = tmp_path / "good"
        write_file(good / "b.mp3")

        real_scandir = os.scandir

        def fake_scandir(path="."):
            if os.path.normpath(os.fspath(path)) == os.path.normpath(str(bad)):
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

        tracks = scan([str(bad), str(good)])

        assert [t.title for t in tracks] == ["b"]

    def test_stat_failure_drops_only_that_file(self, tmp_path: Path, monkeypatch):
        write_file(tmp_path / "a.mp3")
        broken = write_file(tmp_path / "b.mp3")
        write_file(tmp_path / "c.mp3")

        real_stat = os.stat

        def fake_stat(path, *args, **kwargs):
            if os.fspath(path) == str(broken):
                raise OSError(5, "Input/output error", os.fspath(path))
            return real_stat(path, *args, **kwargs)

        monkeypatch.setattr(scan_library.os, "stat", fake_stat)

        tracks = scan([str(tmp_path)])

        assert [t.title for t in tracks] == ["a", "c"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinks_are_not_followed(self, tmp_path: Path):
        outside = tmp_path / "outside"
        write_file(outside / "linked_dir_song.mp3")
        target = write_file(outside / "target.mp3")

        root = tmp_path / "root"
        write_file(root / "real.mp3")
        try:
            os.symlink(target, root / "link.mp3")
            os.symlink(outside, root / "linkdir", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")

        tracks = scan([str(root)])

        assert [t.title for t in tracks] == ["real"]

    def test_rescan_is_structurally_equal(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")
        write_file(tmp_path / "x" / "b.mp3")

        first = scan([str(tmp_path)])
        second = scan([str(tmp_path)])

        assert first == second
        assert first is not second
        assert [(t.path, t.title) for t in first] == [(t.path, t.title) for t in second]

    def test_rescan_sees_new_files(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")
        assert len(scan([str(tmp_path)])) == 1

        write_file(tmp_path / "b.mp3")
        assert len(scan([str(tmp_path)])) == 2

    def test_cancelled_scan_raises(self, tmp_path: Path):
        write_file(tmp_path / "a.mp3")
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ScanCancelled):
            scan([str(tmp_path)], cancel=cancel)

    def test_cancel_midway(self, tmp_path: Path):
        for i in range(5):
            write_file(tmp_path / f"{i}.mp3")
        cancel = threading.Event()
        seen = []

        def on_track(track):
            seen.append(track)
            if len(seen) == 2:
                cancel.set()

        with pytest.raises(ScanCancelled):
            scan([str(tmp_path)], cancel=cancel, on_track=on_track)
        assert len(seen) == 2

    def test_empty_roots(self):
        assert scan([]) == []
        assert scan([""]) == []
