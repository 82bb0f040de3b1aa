"""
Conversion Pipeline Orchestrator

Read → Validate → Process → Combine → Process → Write.

Every failure is caught here and returned as a ConvertResult; callers
branch on ``result.ok`` instead of handling exceptions.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from rich.console import Console
from rich.markup import escape

from splat_utils.data_table import DataTable, Element, FileRecord
from splat_utils.validation import ConvertOptions, missing_splat_columns

from . import codecs
from .codecs import is_compressed_ply
from .combine import ZERO_FILL, FillPolicy, combine
from .commit import write_file
from .errors import (
    EmptyResultError,
    ErrorKind,
    SchemaViolationError,
    classify_error,
)
from .formats import CodecKind, resolve_input_kind
from .process import ProcessAction, process_data_table

console = Console()

PathLike = Union[str, Path]


class ConversionStage(str, Enum):
    IDLE = "idle"
    READING = "reading"
    VALIDATING = "validating"
    PROCESSING = "processing"
    COMBINING = "combining"
    POST_PROCESSING = "post-processing"
    WRITING = "writing"
    DONE = "done"


@dataclass
class ConversionStats:
    """Wall-clock time spent per stage (summed over sources)."""
    start_time: float = 0
    end_time: float = 0
    stages: Dict[str, float] = field(default_factory=dict)

    def start(self):
        self.start_time = time.time()

    def stop(self):
        self.end_time = time.time()

    def record_stage(self, stage: ConversionStage, duration: float):
        self.stages[stage.value] = self.stages.get(stage.value, 0.0) + duration

    @property
    def total_duration(self) -> float:
        return self.end_time - self.start_time

    def to_dict(self) -> Dict:
        return {
            "total_duration_seconds": self.total_duration,
            "stages": dict(self.stages),
        }


@dataclass
class ConvertResult:
    """
    Outcome of a conversion.

    On success ``ok`` is True and ``num_rows`` / ``output_path`` describe what
    was written. On failure ``error`` holds the exception, ``error_kind`` its
    classification and ``stage`` the stage that failed (a failed run is
    distinguished by ``ok``, not by a dedicated stage).
    """
    ok: bool
    num_rows: int = 0
    output_path: Optional[Path] = None
    error: Optional[Exception] = None
    error_kind: Optional[ErrorKind] = None
    stage: ConversionStage = ConversionStage.DONE
    stats: Dict = field(default_factory=dict)

    @classmethod
    def success(cls, num_rows: int, output_path: Path, stats: Optional[Dict] = None) -> "ConvertResult":
        return cls(ok=True, num_rows=num_rows, output_path=output_path, stats=stats or {})

    @classmethod
    def failure(cls, error: Exception, stage: ConversionStage, stats: Optional[Dict] = None) -> "ConvertResult":
        return cls(
            ok=False,
            error=error,
            error_kind=classify_error(error),
            stage=stage,
            stats=stats or {},
        )


def read_file(filename: PathLike, params: Sequence[str] = ()) -> FileRecord:
    """
    Read any supported input into a FileRecord.

    '.mjs' inputs go to the procedural generator without opening a file.
    A '.ply' input is parsed first, then decompressed if its content is a
    compressed PLY.
    """
    path = Path(filename)
    kind = resolve_input_kind(path)

    console.print(f"[blue]reading '{escape(str(path))}'...[/blue]")

    if kind is CodecKind.MJS:
        return codecs.registry.get_generator()(path, list(params))

    reader = codecs.registry.get_reader(kind)
    with open(path, 'rb') as fh:
        record = reader(fh, path)

    if kind is CodecKind.PLY and is_compressed_ply(record):
        console.print("[dim]  compressed PLY detected[/dim]")
        table = codecs.registry.get_decompressor()(record)
        record = FileRecord(comments=record.comments, elements=[Element('vertex', table)])

    return record


def validate_splat_file(record: FileRecord, filename: PathLike) -> DataTable:
    """Return the vertex table of ``record`` or raise SchemaViolationError."""
    names = record.element_names
    if names != ['vertex']:
        raise SchemaViolationError(
            f"Unsupported data in file '{filename}': "
            f"expected a single 'vertex' element, found {names}"
        )

    table = record.elements[0].table
    if table.num_rows == 0:
        raise SchemaViolationError(f"Unsupported data in file '{filename}': no splats")

    missing = missing_splat_columns(table)
    if missing:
        raise SchemaViolationError(
            f"Unsupported data in file '{filename}': missing splat columns {missing}"
        )

    return table


def convert_files(
    input_paths: Sequence[PathLike],
    output_path: PathLike,
    options: Optional[ConvertOptions] = None,
    source_actions: Sequence[ProcessAction] = (),
    actions: Sequence[ProcessAction] = (),
    policy: FillPolicy = ZERO_FILL,
) -> ConvertResult:
    """
    Convert one or more splat files into a single output file.

    ``source_actions`` run on each source table before merging, ``actions``
    on the merged table. Never raises for conversion failures.
    """
    options = options or ConvertOptions()
    stats = ConversionStats()
    stats.start()
    stage = ConversionStage.IDLE

    try:
        if not input_paths:
            raise SchemaViolationError("No input files given")

        tables = []
        for input_path in input_paths:
            path = Path(input_path).resolve()

            stage = ConversionStage.READING
            stage_start = time.time()
            record = read_file(path)
            stats.record_stage(stage, time.time() - stage_start)

            stage = ConversionStage.VALIDATING
            table = validate_splat_file(record, input_path)

            stage = ConversionStage.PROCESSING
            stage_start = time.time()
            tables.append(process_data_table(table, source_actions))
            stats.record_stage(stage, time.time() - stage_start)

        stage = ConversionStage.COMBINING
        stage_start = time.time()
        merged = combine(tables, policy)
        stats.record_stage(stage, time.time() - stage_start)

        stage = ConversionStage.POST_PROCESSING
        stage_start = time.time()
        merged = process_data_table(merged, actions)
        stats.record_stage(stage, time.time() - stage_start)

        if merged.num_rows == 0:
            raise EmptyResultError("No splats to write")

        console.print(f"[green]Loaded {merged.num_rows} gaussians[/green]")

        stage = ConversionStage.WRITING
        stage_start = time.time()
        target = write_file(Path(output_path).resolve(), merged, options)
        stats.record_stage(stage, time.time() - stage_start)

    except Exception as e:
        stats.stop()
        console.print(f"[bold red]Conversion failed ({stage.value}):[/bold red] {escape(str(e))}")
        return ConvertResult.failure(e, stage, stats.to_dict())

    stats.stop()
    console.print(f"[green]Wrote {merged.num_rows} gaussians to {escape(target.name)} "
                  f"({stats.total_duration:.2f}s)[/green]")
    return ConvertResult.success(merged.num_rows, target, stats.to_dict())


def convert_gsplat(
    input_path: PathLike,
    output_path: PathLike,
    options: Optional[ConvertOptions] = None,
) -> ConvertResult:
    """Convert a single Gaussian-splat file. See convert_files."""
    return convert_files([input_path], output_path, options)
