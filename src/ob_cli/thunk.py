"""Access to the vendored ob thunk of a project.

Only the unpacked form is supported here: the thunk directory must be a git
checkout that the upgrade flow can point at another branch and pull.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ob_cli.core.errors import ThunkError
from ob_cli.core.git import run_git

logger = logging.getLogger(__name__)


@contextmanager
def update_thunk(thunk_dir: Path) -> Iterator[Path]:
    """Yield the checkout of *thunk_dir* so callers can inspect and modify it."""
    if not thunk_dir.is_dir():
        raise ThunkError(f"Thunk {thunk_dir} does not exist")

    check = run_git(thunk_dir, ["rev-parse", "--show-toplevel"])
    if not check.ok:
        raise ThunkError(f"Thunk {thunk_dir} is not an unpacked git checkout")
    if Path(check.stdout.strip()).resolve() != thunk_dir.resolve():
        raise ThunkError(
            f"Thunk {thunk_dir} is not an unpacked git checkout "
            f"(it belongs to {check.stdout.strip()})"
        )

    logger.debug("Opened thunk checkout %s", thunk_dir)
    yield thunk_dir
