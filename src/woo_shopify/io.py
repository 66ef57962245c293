from __future__ import annotations
import csv
import logging
import zipfile
from enum import Enum
from io import BytesIO, StringIO
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple


log = logging.getLogger(__name__)

BOM = "\ufeff"


def read_rows(input_path: Path) -> list:
    """Read a CSV (BOM tolerated) into a list of dict rows keyed by its header."""
    with input_path.open("r", newline="", encoding="utf-8-sig") as f:
        return [dict(r) for r in csv.DictReader(f)]


def read_header(input_path: Path) -> list[str]:
    with input_path.open("r", newline="", encoding="utf-8-sig") as f:
        for row in csv.reader(f):
            return [str(c) for c in row]
    return []


def list_csv_files(directory: Path) -> list[Path]:
    if not directory.exists() or not directory.is_dir():
        raise FileNotFoundError(f"Folder not found: {directory}")
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")


def to_csv_text(rows: Iterable[dict], fieldnames: Sequence[str], bom: bool = True) -> str:
    buf = StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(fieldnames), lineterminator="\n")
    writer.writeheader()
    for r in rows:
        writer.writerow(r)
    return (BOM if bom else "") + buf.getvalue()


def write_csv(output_path: Path, rows: Iterable[dict], fieldnames: Sequence[str]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8-sig") as f:
        writer = csv.DictWriter(f, fieldnames=list(fieldnames), lineterminator="\n")
        writer.writeheader()
        for r in rows:
            writer.writerow(r)


class BatchState(str, Enum):
    COLLECTING = "collecting"
    FLUSHING = "flushing"
    FINALIZED = "finalized"


class BatchWriter:
    """Accumulates records and writes every ``batch_size`` of them as one CSV
    file (``<prefix>_<n>.csv``) inside an in-memory ZIP archive.
    """

    def __init__(self, fieldnames: Sequence[str], batch_size: int = 2000, prefix: str = "woocommerce_products") -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.fieldnames = list(fieldnames)
        self.batch_size = batch_size
        self.prefix = prefix
        self.pending: List[dict] = []
        self.files: List[Tuple[str, int]] = []
        self.state = BatchState.COLLECTING
        self._buffer = BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", zipfile.ZIP_DEFLATED)
        self._allowed = set(self.fieldnames)

    @property
    def total_rows(self) -> int:
        return sum(n for _, n in self.files) + len(self.pending)

    @property
    def manifest(self) -> List[str]:
        return [name for name, _ in self.files]

    def append(self, record: dict) -> None:
        if self.state is BatchState.FINALIZED:
            raise RuntimeError("BatchWriter already finalized")
        extra = set(record) - self._allowed
        if extra:
            raise ValueError(f"Unknown output fields: {sorted(extra)}")
        self.pending.append(dict(record))
        self.flush_if_full()

    def flush_if_full(self) -> bool:
        if len(self.pending) < self.batch_size:
            return False
        self._flush()
        return True

    def _flush(self) -> None:
        if not self.pending:
            return
        self.state = BatchState.FLUSHING
        name = f"{self.prefix}_{len(self.files) + 1}.csv"
        self._zip.writestr(name, to_csv_text(self.pending, self.fieldnames).encode("utf-8"))
        self.files.append((name, len(self.pending)))
        log.info("Saved %s with %d rows", name, len(self.pending))
        self.pending = []
        self.state = BatchState.COLLECTING

    def finalize(self) -> bytes:
        """Flush the last partial batch and return the ZIP archive bytes."""
        if self.state is not BatchState.FINALIZED:
            self._flush()
            self._zip.close()
            self.state = BatchState.FINALIZED
        return self._buffer.getvalue()
