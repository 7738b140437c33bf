"""CSV input/output: load targets, write results next to the original rows."""

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from dentalscan.models import POSITIVE_BANDS, ConfidenceBand, Result, Target

# Values that mean "no email" / "no website" in hand-maintained sheets
PLACEHOLDERS = frozenset({"x", "-"})

# Tried in order when encoding="auto". CP949 is a superset of EUC-KR.
AUTO_ENCODINGS = ("utf-8-sig", "cp949")

OUTPUT_ENCODING = "utf-8-sig"  # BOM so spreadsheet tools detect UTF-8
OUTPUT_SUFFIX = "_3d_results.csv"
RESULT_HEADER = ("has_3d_scanner", "confidence", "score", "evidence", "status", "error")

STATUS_FOUND = "found"
STATUS_NOT_FOUND = "not found"
STATUS_ERROR = "error"
STATUS_TIMEOUT = "timeout"
STATUS_SKIPPED = "skipped"


@dataclass
class InputTable:
    """Parsed input: every data row kept verbatim, plus the crawlable subset as Targets."""
    header: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    targets: list[Target] = field(default_factory=list)
    encoding: str = "utf-8-sig"

    @property
    def skipped(self) -> int:
        return len(self.rows) - len(self.targets)


def is_placeholder(value: str | None) -> bool:
    """True for empty values and the placeholders used for missing data."""
    v = (value or "").strip()
    return not v or v.lower() in PLACEHOLDERS


def read_text(path: Path, encoding: str = "auto") -> tuple[str, str]:
    """Decode a file; returns (text, encoding used). 'auto' tries UTF-8 then CP949."""
    raw = Path(path).read_bytes()
    if encoding != "auto":
        return raw.decode(encoding), encoding
    last_exc: UnicodeDecodeError | None = None
    for enc in AUTO_ENCODINGS:
        try:
            return raw.decode(enc), enc
        except UnicodeDecodeError as e:
            last_exc = e
    raise last_exc  # type: ignore[misc]


def load_targets(path: Path, encoding: str = "auto") -> InputTable:
    """
    Read a CSV whose first three columns are name, website, email.
    A row becomes a Target when it has a website or a usable email.
    """
    text, used = read_text(path, encoding)
    text = text.lstrip("\ufeff")
    table = InputTable(encoding=used)
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None:
        return table
    table.header = [cell.strip() for cell in header]
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        cells = [cell.strip() for cell in row]
        index = len(table.rows)
        table.rows.append(cells)
        if len(cells) < 3:
            continue
        name, website, email = cells[0], cells[1], cells[2]
        if is_placeholder(website) and is_placeholder(email):
            continue
        table.targets.append(
            Target(
                name=name,
                website="" if is_placeholder(website) else website,
                email="" if is_placeholder(email) else email,
                row_index=index,
            )
        )
    return table


def skip_reason(website: str, email: str) -> str:
    has_website = not is_placeholder(website)
    has_email = not is_placeholder(email)
    if not has_website and not has_email:
        return "no website or email"
    if not has_website:
        return "no website"
    if not has_email:
        return "no email (website only)"
    return "skipped"


def process_status(result: Result) -> str:
    if result.band is ConfidenceBand.ERROR:
        return STATUS_ERROR
    if result.band is ConfidenceBand.TIMEOUT:
        return STATUS_TIMEOUT
    return STATUS_FOUND if result.band in POSITIVE_BANDS else STATUS_NOT_FOUND


def result_columns(result: Result) -> list[str]:
    return [
        "yes" if result.has_equipment else "no",
        result.band.value,
        str(result.score),
        result.evidence or result.reason,
        process_status(result),
        result.error_message,
    ]


def skipped_columns(row: Sequence[str]) -> list[str]:
    website = row[1] if len(row) > 1 else ""
    email = row[2] if len(row) > 2 else ""
    return ["not checked", "SKIP", "0", skip_reason(website, email), STATUS_SKIPPED, ""]


def output_path_for(input_path: Path) -> Path:
    """<stem>_3d_results.csv beside the input."""
    p = Path(input_path)
    if p.suffix.lower() == ".csv":
        return p.with_name(p.stem + OUTPUT_SUFFIX)
    return p.with_name(p.name + OUTPUT_SUFFIX)


def write_results(path: Path, table: InputTable, results: Sequence[Result]) -> Path:
    """Write every input row with result columns appended; rows not crawled are marked skipped."""
    by_row = {r.row_index: r for r in results if r.row_index >= 0}
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding=OUTPUT_ENCODING, newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow([*table.header, *RESULT_HEADER])
        for index, row in enumerate(table.rows):
            result = by_row.get(index)
            extra = result_columns(result) if result is not None else skipped_columns(row)
            writer.writerow([*row, *extra])
    return path
