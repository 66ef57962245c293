from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .catalog import has_name_without_value
from .io import list_csv_files, read_header, read_rows, write_csv
from .mapping import CategoryTable, UnmappedReport, shopify_taxonomy_table
from .normalize import is_blank


log = logging.getLogger(__name__)

MODES = ("taxonomy", "breadcrumbs")
SUFFIXES = {"taxonomy": "_cleaned.csv", "breadcrumbs": "_crumbs.csv"}
GENERATED_SUFFIXES = tuple(SUFFIXES.values())


@dataclass
class CleanResult:
    source: Path
    output: Optional[Path] = None
    rows: List[Dict] = field(default_factory=list)
    removed: int = 0
    mapped: int = 0
    unmapped: UnmappedReport = field(default_factory=UnmappedReport)


def clean_rows(rows: List[dict], mode: str = "taxonomy", table: Optional[CategoryTable] = None) -> CleanResult:
    if mode not in MODES:
        raise ValueError(f'Unknown mode "{mode}". Use "taxonomy" or "breadcrumbs".')
    table = table or shopify_taxonomy_table()
    result = CleanResult(source=Path())
    for r in rows:
        if has_name_without_value(r):
            result.removed += 1
            continue
        row = dict(r)
        row.pop(None, None)
        raw = row.get("Product Category")
        if not is_blank(raw):
            resolved = table.resolve(raw) if mode == "taxonomy" else table.to_breadcrumb(raw)
            row["Product Category"] = resolved.value
            if resolved.mapped:
                result.mapped += 1
            elif resolved.unmapped:
                result.unmapped.record(resolved.value)
        result.rows.append(row)
    return result


def output_path_for(source: Path, mode: str) -> Path:
    return source.with_name(source.stem + SUFFIXES[mode])


def clean_file(source: Path, mode: str = "taxonomy", table: Optional[CategoryTable] = None) -> CleanResult:
    header = read_header(source)
    result = clean_rows(read_rows(source), mode, table)
    result.source = source
    result.output = output_path_for(source, mode)

    columns = list(header)
    for r in result.rows:
        for k in r:
            if k is not None and k not in columns:
                columns.append(k)
    write_csv(result.output, result.rows, columns)
    log.info(
        "%s -> %s | removed rows (name w/o value): %d | mapped (%s): %d",
        source.name, result.output.name, result.removed, mode, result.mapped,
    )
    result.unmapped.log_summary(log, context=f"{source.name} ({mode} mode)")
    return result


def clean_directory(directory: Path, mode: str = "taxonomy", table: Optional[CategoryTable] = None) -> List[CleanResult]:
    if mode not in MODES:
        raise ValueError(f'Unknown mode "{mode}". Use "taxonomy" or "breadcrumbs".')
    files = [p for p in list_csv_files(directory) if not p.name.lower().endswith(GENERATED_SUFFIXES)]
    if not files:
        log.info("No CSV files found in %s", directory)
    return [clean_file(p, mode, table) for p in files]
