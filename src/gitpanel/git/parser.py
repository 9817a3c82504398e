"""Parsers for git output — porcelain v2 status, unified diff, numstat.

Every function here is pure: text in, frozen records out.  Malformed or
unrecognised lines are skipped rather than reported, so a partially garbled
output still yields whatever could be understood.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from gitpanel.git.models import (
    AheadBehind,
    DiffHunk,
    DiffLine,
    DiffLineKind,
    DiffStats,
    FileDiff,
    FileStatus,
    FileStatusKind,
    RepositoryStatus,
    status_kind_from_code,
)

# --- Porcelain v2 prefixes ---

_BRANCH_HEAD = "# branch.head "
_BRANCH_UPSTREAM = "# branch.upstream "
_BRANCH_AB = "# branch.ab "
_ORDINARY = "1 "
_RENAME_COPY = "2 "
_UNTRACKED = "? "
_UNMERGED = "u "

# Space-separated fields before the path: "1 XY sub mH mI mW hH hI <path>"
_ORDINARY_FIELDS = 8
# "u XY sub m1 m2 m3 mW h1 h2 h3 <path>"
_UNMERGED_FIELDS = 10

# --- Unified diff prefixes ---

_DIFF_HEADER = "diff --git "
_OLD_FILE = "--- a/"
_NEW_FILE = "+++ b/"
_BINARY = "Binary files"
_HUNK = "@@"

HunkRange = Tuple[int, int, int, int]


def _lines(text: str) -> List[str]:
    """Split on LF, dropping the empty tail left by a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _digits(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


# ── status ────────────────────────────────────────────────────────────────────


def _strip_score(path_field: str) -> str:
    """Drop a leading ``R<score>`` / ``C<score>`` token from a rename path."""
    score, sep, rest = path_field.partition(" ")
    if sep and score[:1] in ("R", "C") and _digits(score[1:]):
        return rest
    return path_field


def _parse_changed_entry(
    line: str,
    *,
    keep_unknown_codes: bool,
    strip_rename_score: bool,
) -> Optional[FileStatus]:
    parts = line.split(" ", _ORDINARY_FIELDS)
    if len(parts) <= _ORDINARY_FIELDS:
        return None

    xy = parts[1]
    if len(xy) != 2:
        return None

    path = parts[_ORDINARY_FIELDS]
    original_path: Optional[str] = None

    if line.startswith(_RENAME_COPY):
        # Remainder is "<score> <new>\t<old>"; the score stays on the path
        # unless stripped.
        if strip_rename_score:
            path = _strip_score(path)
        new_path, tab, old_path = path.partition("\t")
        if tab and "\t" not in old_path:
            path, original_path = new_path, old_path

    return FileStatus(
        path=path,
        original_path=original_path,
        staged_status=status_kind_from_code(xy[0], keep_unknown=keep_unknown_codes),
        unstaged_status=status_kind_from_code(xy[1], keep_unknown=keep_unknown_codes),
    )


def _parse_unmerged_entry(line: str) -> Optional[FileStatus]:
    parts = line.split(" ", _UNMERGED_FIELDS)
    if len(parts) <= _UNMERGED_FIELDS:
        return None
    return FileStatus(
        path=parts[_UNMERGED_FIELDS],
        staged_status=FileStatusKind.UNMERGED,
        unstaged_status=FileStatusKind.UNMERGED,
    )


def parse_status(
    text: str,
    *,
    keep_unknown_codes: bool = False,
    strip_rename_score: bool = False,
) -> RepositoryStatus:
    """Parse ``git status --porcelain=v2 --branch`` output.

    Files keep the order git printed them in.  With *keep_unknown_codes*,
    XY characters outside the porcelain table become
    ``FileStatusKind.UNKNOWN`` instead of being treated as "no change".
    """
    branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead = 0
    behind = 0
    files: List[FileStatus] = []

    for line in _lines(text):
        if line.startswith(_BRANCH_HEAD):
            branch = line[len(_BRANCH_HEAD):]
        elif line.startswith(_BRANCH_UPSTREAM):
            upstream = line[len(_BRANCH_UPSTREAM):]
        elif line.startswith(_BRANCH_AB):
            for token in line[len(_BRANCH_AB):].split():
                value = _to_int(token[1:])
                if value is None:
                    continue
                if token.startswith("+"):
                    ahead = value
                elif token.startswith("-"):
                    behind = value
        elif line.startswith(_ORDINARY) or line.startswith(_RENAME_COPY):
            entry = _parse_changed_entry(
                line,
                keep_unknown_codes=keep_unknown_codes,
                strip_rename_score=strip_rename_score,
            )
            if entry is not None:
                files.append(entry)
        elif line.startswith(_UNTRACKED):
            files.append(FileStatus(
                path=line[len(_UNTRACKED):],
                staged_status=FileStatusKind.UNTRACKED,
                unstaged_status=FileStatusKind.UNTRACKED,
            ))
        elif line.startswith(_UNMERGED):
            entry = _parse_unmerged_entry(line)
            if entry is not None:
                files.append(entry)

    return RepositoryStatus(
        branch=branch,
        upstream=upstream,
        ahead=ahead,
        behind=behind,
        files=tuple(files),
    )


# ── diff ──────────────────────────────────────────────────────────────────────


def _parse_range(token: str, sign: str) -> Optional[Tuple[int, int]]:
    """Parse ``-start[,count]`` / ``+start[,count]``; count defaults to 1."""
    if not token.startswith(sign):
        return None
    start, comma, count = token[1:].partition(",")
    if not _digits(start) or (comma and not _digits(count)):
        return None
    return int(start), int(count) if comma else 1


def parse_hunk_header(line: str) -> Optional[HunkRange]:
    """Scan ``@@ -a[,b] +c[,d] @@`` into ``(old_start, old_count, new_start, new_count)``.

    Anything after the closing ``@@`` (the function context git appends) is
    ignored.  Returns ``None`` when the line does not fit the template.
    """
    if not line.startswith("@@ "):
        return None
    close = line.find(" @@", 2)
    if close < 0:
        return None
    tokens = line[3:close].split(" ")
    if len(tokens) != 2:
        return None
    old = _parse_range(tokens[0], "-")
    new = _parse_range(tokens[1], "+")
    if old is None or new is None:
        return None
    return old[0], old[1], new[0], new[1]


class DiffParser:
    """Parse unified diff text (``git diff --no-color``) into FileDiff records.

    Usage::

        for file_diff in DiffParser(diff_text).parse():
            print(file_diff.path, file_diff.additions, file_diff.deletions)
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = _lines(diff_text)
        self._reset_file()
        self._reset_hunk()
        self._diffs: List[FileDiff] = []

    # ---- accumulators ----

    def _reset_file(self) -> None:
        self._path: Optional[str] = None
        self._old_path: Optional[str] = None
        self._is_binary = False
        self._hunks: List[DiffHunk] = []

    def _reset_hunk(self) -> None:
        self._header: Optional[str] = None
        self._range: HunkRange = (0, 0, 0, 0)
        self._hunk_lines: List[DiffLine] = []
        self._old_no = 0
        self._new_no = 0

    def _flush_hunk(self) -> None:
        if self._header is not None:
            old_start, old_count, new_start, new_count = self._range
            self._hunks.append(DiffHunk(
                header=self._header,
                old_start=old_start,
                old_count=old_count,
                new_start=new_start,
                new_count=new_count,
                lines=tuple(self._hunk_lines),
            ))
        self._reset_hunk()

    def _flush_file(self) -> None:
        self._flush_hunk()
        if self._path is not None:
            old_path = self._old_path if self._old_path != self._path else None
            self._diffs.append(FileDiff(
                path=self._path,
                old_path=old_path,
                is_binary=self._is_binary,
                hunks=() if self._is_binary else tuple(self._hunks),
            ))
        self._reset_file()

    # ---- line handlers ----

    def _start_hunk(self, line: str) -> None:
        self._flush_hunk()
        self._header = line
        parsed = parse_hunk_header(line)
        if parsed is not None:
            self._range = parsed
            self._old_no = parsed[0]
            self._new_no = parsed[2]
        self._hunk_lines.append(DiffLine(kind=DiffLineKind.HUNK_HEADER, content=line))

    def _content_line(self, line: str) -> None:
        if line.startswith("+"):
            self._hunk_lines.append(DiffLine(
                kind=DiffLineKind.ADDITION,
                content=line[1:],
                new_line_number=self._new_no,
            ))
            self._new_no += 1
        elif line.startswith("-"):
            self._hunk_lines.append(DiffLine(
                kind=DiffLineKind.DELETION,
                content=line[1:],
                old_line_number=self._old_no,
            ))
            self._old_no += 1
        elif line.startswith(" ") or not line:
            self._hunk_lines.append(DiffLine(
                kind=DiffLineKind.CONTEXT,
                content=line[1:],
                old_line_number=self._old_no,
                new_line_number=self._new_no,
            ))
            self._old_no += 1
            self._new_no += 1
        # "\ No newline at end of file" and anything else → skip

    def parse(self) -> List[FileDiff]:
        """Return one FileDiff per ``diff --git`` section, in input order."""
        self._diffs = []
        self._reset_file()
        self._reset_hunk()

        for line in self._lines:
            if line.startswith(_DIFF_HEADER):
                self._flush_file()
                _, marker, path = line.rpartition(" b/")
                if marker:
                    self._path = path
                continue

            if line.startswith(_HUNK):
                if self._path is not None and not self._is_binary:
                    self._start_hunk(line)
                continue

            # Inside a hunk every line is content, even "--- a/..." lookalikes
            if self._header is not None:
                self._content_line(line)
                continue

            if line.startswith(_OLD_FILE):
                self._old_path = line[len(_OLD_FILE):]
            elif line.startswith(_NEW_FILE):
                self._path = line[len(_NEW_FILE):]
            elif line.startswith(_BINARY):
                self._is_binary = True
            # index / mode / similarity / rename sub-headers → skip

        self._flush_file()
        return self._diffs


def parse_diff(text: str) -> List[FileDiff]:
    """Parse ``git diff`` output into FileDiff records."""
    return DiffParser(text).parse()


# ── numstat / rev-list ────────────────────────────────────────────────────────


def parse_numstat(text: str) -> DiffStats:
    """Sum ``insertions<TAB>deletions<TAB>path`` lines.

    Binary files show as ``-\\t-\\tpath`` and are skipped entirely: they add
    nothing to insertions, deletions or the file count.
    """
    insertions = 0
    deletions = 0
    files = 0
    for line in _lines(text):
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        added = _to_int(parts[0])
        removed = _to_int(parts[1])
        if added is None or removed is None:
            continue
        insertions += added
        deletions += removed
        files += 1
    return DiffStats(insertions=insertions, deletions=deletions, files=files)


def parse_ahead_behind(text: str) -> AheadBehind:
    """Parse ``rev-list --left-right --count @{u}...HEAD`` output.

    The left count is commits only on the upstream (behind), the right count
    is commits only on HEAD (ahead).  Anything but two integers gives (0, 0).
    """
    parts = text.strip().split("\t")
    if len(parts) != 2:
        return AheadBehind()
    behind = _to_int(parts[0])
    ahead = _to_int(parts[1])
    if behind is None or ahead is None:
        return AheadBehind()
    return AheadBehind(ahead=ahead, behind=behind)
