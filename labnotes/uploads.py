"""
Staging of attachment files into the shared uploads directory.

The notebook store only records filenames. The files themselves are copied
into the uploads directory first, under a collision-resistant name of the
form "<epoch-ms>-<original name>", so two technicians attaching "result.pdf"
never overwrite each other.
"""

import shutil
import time
from pathlib import Path
from typing import List, Optional, Sequence, Union

MAX_ATTACHMENTS = 10


def stored_filename(original: Union[str, Path], stamp_ms: int) -> str:
    """Name under which an upload is stored."""
    return f"{stamp_ms}-{Path(original).name}"


def stage_attachments(
    sources: Sequence[Union[str, Path]],
    uploads_dir: Union[str, Path],
    dry_run: bool = False,
    stamp_ms: Optional[int] = None,
) -> List[str]:
    """
    Copy attachment files into the uploads directory.

    Parameters
    ----------
    sources
        Paths of the files to attach.
    uploads_dir
        Destination directory; created if missing.
    dry_run
        Compute the stored names without copying anything.
    stamp_ms
        Timestamp prefix override (tests). Defaults to the current time.

    Returns
    -------
    list[str]
        Stored filenames, in the order given.

    Raises
    ------
    ValueError
        If more than MAX_ATTACHMENTS files are given.
    FileNotFoundError
        If a source file does not exist.
    """
    if len(sources) > MAX_ATTACHMENTS:
        raise ValueError(f"At most {MAX_ATTACHMENTS} attachments are allowed per entry")

    for src in sources:
        if not Path(src).is_file():
            raise FileNotFoundError(f"Attachment not found: {src}")

    stamp = stamp_ms if stamp_ms is not None else int(time.time() * 1000)
    names = [stored_filename(src, stamp) for src in sources]

    if dry_run or not names:
        return names

    target_dir = Path(uploads_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    copied: List[Path] = []
    try:
        for src, name in zip(sources, names):
            dest = target_dir / name
            shutil.copy2(src, dest)
            copied.append(dest)
    except OSError:
        # Leave nothing half-staged behind.
        for dest in copied:
            dest.unlink(missing_ok=True)
        raise

    return names
