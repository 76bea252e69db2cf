"""Tests for fixation list and stimulus loading.

Verifies:
    - Header line skipped whatever it contains
    - Integer pairs parsed (whitespace tolerated), everything else counted
      as malformed and skipped
    - Missing files raise FileNotFoundError
    - Stimulus decoded to (H, W, 3) uint8, RGB by default

Run: pytest tests/test_fixations.py -v
"""
import cv2
import numpy as np
import pytest

from src.data_pipeline.fixations import (
    FixationPoint,
    load_fixation_list,
    parse_fixation_line,
)
from src.data_pipeline.stimulus import load_stimulus


def write_lines(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


# ============================================================================
# LINE PARSING
# ============================================================================

@pytest.mark.parametrize("line,expected", [
    ("100,100", FixationPoint(100, 100)),
    ("100,100\n", FixationPoint(100, 100)),
    (" 7 , 8 ", FixationPoint(7, 8)),
    ("-3,4", FixationPoint(-3, 4)),
    ("+5,6", FixationPoint(5, 6)),
    ("2147483647,-2147483648", FixationPoint(2147483647, -2147483648)),
    ("9999,9999", FixationPoint(9999, 9999)),
])
def test_parse_valid(line, expected):
    assert parse_fixation_line(line) == expected


@pytest.mark.parametrize("line", [
    "",
    "5",
    "1,2,3",
    "a,b",
    "12.5,3",
    "1e3,5",
    "x,y",
    ",",
    "1_000,5",
    "5,1_000",
    "\u0661\u0662,3",     # Arabic-Indic digits
    "\uff11,2",           # fullwidth digit
    "0x10,2",
    "2147483648,5",
    "5,-2147483649",
    "99999999999999999999,5",
])
def test_parse_malformed(line):
    assert parse_fixation_line(line) is None


# ============================================================================
# FILE READING
# ============================================================================

def test_header_skipped(tmp_path):
    """The first line is dropped even when it looks like data."""
    path = write_lines(tmp_path / "fix.csv", ["1,1", "2,2", "3,3"])

    fixlist = load_fixation_list(path)

    assert fixlist.points == [FixationPoint(2, 2), FixationPoint(3, 3)]
    assert fixlist.n_records == 2
    assert fixlist.n_malformed == 0


def test_malformed_lines_counted(tmp_path):
    path = write_lines(tmp_path / "fix.csv", [
        "x,y", "10,10", "5", "a,b", "1,2,3", "", "20,20",
    ])

    fixlist = load_fixation_list(path)

    assert fixlist.points == [FixationPoint(10, 10), FixationPoint(20, 20)]
    assert fixlist.n_records == 6
    assert fixlist.n_malformed == 4
    assert fixlist.path == path


def test_order_and_duplicates_preserved(tmp_path):
    path = write_lines(tmp_path / "fix.csv", ["x,y", "5,6", "1,2", "5,6"])

    points = load_fixation_list(path).points

    assert [tuple(p) for p in points] == [(5, 6), (1, 2), (5, 6)]


def test_header_only(tmp_path):
    fixlist = load_fixation_list(write_lines(tmp_path / "fix.csv", ["x,y"]))

    assert fixlist.points == []
    assert fixlist.n_records == 0


def test_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    assert load_fixation_list(path).points == []


def test_crlf_line_endings(tmp_path):
    path = tmp_path / "fix.csv"
    path.write_bytes(b"x,y\r\n10,20\r\n30,40\r\n")

    assert load_fixation_list(path).points == [FixationPoint(10, 20), FixationPoint(30, 40)]


def test_oversized_coordinate_skipped(tmp_path):
    """A coordinate beyond the 32-bit range is a malformed record, not a crash."""
    path = write_lines(tmp_path / "fix.csv", ["x,y", "10,10", "99999999999999999999,5", "1_000,2"])

    fixlist = load_fixation_list(path)

    assert fixlist.points == [FixationPoint(10, 10)]
    assert fixlist.n_records == 3
    assert fixlist.n_malformed == 2


def test_missing_fixation_list(tmp_path):
    with pytest.raises(FileNotFoundError, match="Fixation list not found"):
        load_fixation_list(tmp_path / "nope.csv")


# ============================================================================
# STIMULUS
# ============================================================================

@pytest.fixture
def stimulus_file(tmp_path):
    """8x6 PNG, pure red in RGB (written by OpenCV as BGR)."""
    bgr = np.zeros((6, 8, 3), dtype=np.uint8)
    bgr[..., 2] = 255
    path = tmp_path / "stim.png"
    assert cv2.imwrite(str(path), bgr)
    return path


def test_stimulus_rgb(stimulus_file):
    img = load_stimulus(stimulus_file)

    assert img.shape == (6, 8, 3)
    assert img.dtype == np.uint8
    assert np.all(img[..., 0] == 255)
    assert np.all(img[..., 2] == 0)


def test_stimulus_bgr(stimulus_file):
    img = load_stimulus(stimulus_file, channel_order="bgr")
    assert np.all(img[..., 2] == 255)
    assert np.all(img[..., 0] == 0)


def test_grayscale_stimulus_promoted(tmp_path):
    path = tmp_path / "gray.png"
    assert cv2.imwrite(str(path), np.full((5, 7), 90, dtype=np.uint8))

    img = load_stimulus(path)

    assert img.shape == (5, 7, 3)
    assert np.all(img == 90)


def test_missing_stimulus(tmp_path):
    with pytest.raises(FileNotFoundError, match="Stimulus image"):
        load_stimulus(tmp_path / "missing.png")


def test_undecodable_stimulus(tmp_path):
    path = tmp_path / "bad.png"
    path.write_bytes(b"not an image")
    with pytest.raises(FileNotFoundError):
        load_stimulus(path)


def test_stimulus_unknown_order(stimulus_file):
    with pytest.raises(ValueError, match="channel order"):
        load_stimulus(stimulus_file, channel_order="hsv")
