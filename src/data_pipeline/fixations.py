"""Fixation list reader.

File format (CSV, no quoting):
    x,y            ← header line, always skipped whatever it contains
    100,100
    500,500

Each data line is split on ","; a line yields a fixation only when it has
exactly two fields and both are plain ASCII decimal integers (optional sign,
surrounding whitespace allowed) within the 32-bit signed range. Anything
else ("5", "1,2,3", "12.5", "1_000", "abc", a blank line, a coordinate
beyond 2**31 - 1) is skipped and counted as malformed. Processing always
continues with the next line.

Coordinates are not bounds-checked here; out-of-raster points are dropped
by density.accumulate_fixations().
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

_INT_FIELD = re.compile(r"[+-]?[0-9]+", re.ASCII)
INT32_MIN, INT32_MAX = -2**31, 2**31 - 1


class FixationPoint(NamedTuple):
    """Gaze sample in output-image pixel coordinates."""
    x: int
    y: int


@dataclass
class FixationList:
    """Parsed fixation list.

    Attributes
    ----------
    path : Path
        Source file
    points : list[FixationPoint]
        Fixations in file order
    n_records : int
        Data lines read (header excluded)
    n_malformed : int
        Data lines skipped because they were not an integer pair
    """
    path: Path
    points: List[FixationPoint] = field(default_factory=list)
    n_records: int = 0
    n_malformed: int = 0


def parse_fixation_line(line: str) -> Optional[FixationPoint]:
    """Parse one data line, returning None when it is not an integer pair."""
    fields = [f.strip() for f in line.strip().split(',')]
    if len(fields) != 2 or not all(_INT_FIELD.fullmatch(f) for f in fields):
        return None
    x, y = int(fields[0]), int(fields[1])
    if not (INT32_MIN <= x <= INT32_MAX and INT32_MIN <= y <= INT32_MAX):
        return None
    return FixationPoint(x, y)


def load_fixation_list(path: Union[str, Path]) -> FixationList:
    """Read a fixation list file.

    Parameters
    ----------
    path : Union[str, Path]
        CSV file with a header line and one ``x,y`` pair per line

    Returns
    -------
    FixationList
        Parsed points plus record/malformed counts

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    OSError
        If the file exists but cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Fixation list not found: {path}")

    result = FixationList(path=path)
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for index, line in enumerate(f):
            if index == 0:
                continue
            result.n_records += 1
            point = parse_fixation_line(line)
            if point is None:
                result.n_malformed += 1
                continue
            result.points.append(point)

    if result.n_malformed:
        logger.debug(f"Skipped {result.n_malformed}/{result.n_records} malformed record(s) in {path}")
    logger.debug(f"Read {len(result.points)} fixation(s) from {path}")
    return result
