"""
Crash-safe output writing.

The target path is never written directly. Output is staged in a hidden
temporary file in the target's directory (same filesystem, so the final
rename is atomic), flushed to stable storage, then renamed over the target.
"""

import os
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Optional, Union

from rich.console import Console
from rich.markup import escape

from splat_utils.data_table import DataTable
from splat_utils.validation import ConvertOptions

from . import codecs
from .codecs import WriteContext
from .formats import resolve_output_kind

console = Console()


def temp_path_for(target: Path) -> Path:
    """Hidden staging path beside ``target``: .<name>.<pid>.<ms>.<hex>.tmp"""
    name = f".{target.name}.{os.getpid()}.{int(time.time() * 1000)}.{secrets.token_hex(6)}.tmp"
    return target.parent / name


def _close_quietly(fh: BinaryIO) -> None:
    # data is already on disk when this runs after fsync
    try:
        fh.close()
    except OSError as e:
        console.print(f"[yellow]Ignoring error closing {escape(str(fh.name))}: {escape(str(e))}[/yellow]")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        console.print(f"[yellow]Could not remove temporary file {escape(str(path))}: {escape(str(e))}[/yellow]")


def _fsync_dir(path: Path) -> None:
    # persist the rename itself; not every platform can open a directory
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError as e:
        # the rename already happened; the target holds the new content
        console.print(f"[yellow]Ignoring error syncing directory {escape(str(path))}: {escape(str(e))}[/yellow]")
    finally:
        os.close(fd)


def write_file(
    filename: Union[str, Path],
    table: DataTable,
    options: Optional[ConvertOptions] = None,
) -> Path:
    """
    Write ``table`` to ``filename`` using the codec its suffix selects.

    Raises UnsupportedFormatError / CodecError before any file is touched
    when no writer applies. On a failed write the target is left as it was
    and the staging file is removed.

    ``options.overwrite`` is carried but not enforced: the final rename
    always replaces an existing target.
    """
    options = options or ConvertOptions()
    target = Path(filename)

    kind = resolve_output_kind(target)
    writer = codecs.registry.get_writer(kind)

    console.print(f"[blue]writing '{escape(str(target))}'...[/blue]")

    tmp_path = temp_path_for(target)
    context = WriteContext(
        filename=target,
        iterations=options.iterations,
        device=options.device,
    )

    # exclusive create: never reuse a colliding staging name
    fh = open(tmp_path, 'xb')
    try:
        try:
            writer(fh, table, context)
            fh.flush()
            os.fsync(fh.fileno())
        finally:
            _close_quietly(fh)
        os.replace(tmp_path, target)
    except BaseException:
        _discard(tmp_path)
        raise

    _fsync_dir(target.parent)
    return target
