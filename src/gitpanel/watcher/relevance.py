"""Which filesystem changes can affect ``git status``."""

from __future__ import annotations

import os
from typing import Iterable

_GIT_DIR = "/.git/"
_GIT_INDEX = "/.git/index"
_GIT_HEAD = "/.git/HEAD"
_GIT_REFS = "/.git/refs/"
_GITIGNORE = ".gitignore"


def is_relevant_path(path: str) -> bool:
    """Return True if a change at *path* may change the repository status.

    Inside ``.git`` only the index, HEAD and refs matter (staging, commits,
    checkouts).  Elsewhere, dot-files are noise except ``.gitignore``.
    """
    normalised = path.replace(os.sep, "/")
    if not normalised.startswith("/"):
        normalised = "/" + normalised

    if _GIT_DIR in normalised:
        return (
            normalised.endswith(_GIT_INDEX)
            or normalised.endswith(_GIT_HEAD)
            or _GIT_REFS in normalised
        )

    name = normalised.rstrip("/").rsplit("/", 1)[-1]
    if name.startswith(".") and name != _GITIGNORE:
        return False
    return True


def has_relevant_change(paths: Iterable[str]) -> bool:
    return any(is_relevant_path(p) for p in paths)
