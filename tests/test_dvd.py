"""Tests for dvd.py — VIDEO_TS detection and main-title VOB selection."""
from pathlib import Path

from dvd import (
    dvd_main_title_vobs,
    dvd_root_from_video_ts_dir,
    is_inside_video_ts,
    is_video_ts_dir,
)
from tests.conftest import make_dvd, make_file


class TestVideoTsDetection:
    def test_name_match_is_case_insensitive(self):
        assert is_video_ts_dir(Path("/a/VIDEO_TS"))
        assert is_video_ts_dir(Path("/a/video_ts"))
        assert not is_video_ts_dir(Path("/a/AUDIO_TS"))

    def test_root_is_parent(self):
        assert dvd_root_from_video_ts_dir(Path("/a/MOVIE/VIDEO_TS")) == Path("/a/MOVIE")
        assert dvd_root_from_video_ts_dir(Path("/a/MOVIE")) is None

    def test_inside_video_ts(self):
        root = Path("/in")
        assert is_inside_video_ts(root / "MOVIE" / "VIDEO_TS" / "VTS_01_1.VOB", root)
        assert is_inside_video_ts(root / "MOVIE" / "Video_TS" / "x" / "a.jpg", root)
        assert not is_inside_video_ts(root / "MOVIE" / "cover.jpg", root)
        assert not is_inside_video_ts(root / "VIDEO_TS.jpg", root)

    def test_scan_root_itself_is_video_ts(self):
        root = Path("/in/MOVIE/VIDEO_TS")
        assert is_inside_video_ts(root / "VTS_01_1.VOB", root)


class TestMainTitleVobs:
    def test_picks_largest_title_set_in_part_order(self, tmp_path):
        root = make_dvd(tmp_path / "MOVIE", {
            1: [10, 100, 100, 50],   # menu + 250 bytes of title
            2: [10, 40],             # extras
        })
        vobs = dvd_main_title_vobs(root)
        assert [v.name for v in vobs] == ["VTS_01_1.VOB", "VTS_01_2.VOB", "VTS_01_3.VOB"]

    def test_menu_vobs_never_selected(self, tmp_path):
        root = make_dvd(tmp_path / "MOVIE", {1: [5000, 10]})
        assert [v.name for v in dvd_main_title_vobs(root)] == ["VTS_01_1.VOB"]

    def test_tie_goes_to_lowest_title(self, tmp_path):
        root = make_dvd(tmp_path / "MOVIE", {3: [0, 20], 2: [0, 20]})
        assert [v.name for v in dvd_main_title_vobs(root)] == ["VTS_02_1.VOB"]

    def test_parts_ordered_numerically(self, tmp_path):
        root = tmp_path / "MOVIE"
        for part in (10, 2, 1):
            make_file(root / "VIDEO_TS" / f"VTS_01_{part}.VOB", b"x")
        assert [v.name for v in dvd_main_title_vobs(root)] == [
            "VTS_01_1.VOB", "VTS_01_2.VOB", "VTS_01_10.VOB",
        ]

    def test_lowercase_layout(self, tmp_path):
        root = tmp_path / "MOVIE"
        make_file(root / "video_ts" / "vts_01_1.vob", b"x")
        assert [v.name for v in dvd_main_title_vobs(root)] == ["vts_01_1.vob"]

    def test_no_title_vobs(self, tmp_path):
        root = tmp_path / "MOVIE"
        make_file(root / "VIDEO_TS" / "VIDEO_TS.IFO", b"ifo")
        assert dvd_main_title_vobs(root) == []

    def test_no_video_ts(self, tmp_path):
        (tmp_path / "EMPTY").mkdir()
        assert dvd_main_title_vobs(tmp_path / "EMPTY") == []
