"""JSON reporter — status, diffs and stats as machine-readable documents."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from gitpanel.git.models import DiffStats, FileDiff, FileStatus, RepositoryStatus


def _kind(value) -> Optional[str]:
    return value.value if value is not None else None


def file_status_to_dict(entry: FileStatus) -> Dict[str, Any]:
    return {
        "path": entry.path,
        **({"original_path": entry.original_path} if entry.original_path else {}),
        "staged": _kind(entry.staged_status),
        "unstaged": _kind(entry.unstaged_status),
        "conflicted": entry.has_conflicts,
    }


def status_to_dict(status: RepositoryStatus) -> Dict[str, Any]:
    """Convert RepositoryStatus to a JSON-serialisable dict."""
    return {
        "branch": status.branch,
        "upstream": status.upstream,
        "ahead": status.ahead,
        "behind": status.behind,
        "clean": status.is_clean,
        "files": [file_status_to_dict(f) for f in status.files],
        "summary": {
            "staged": len(status.staged_files),
            "modified": len(status.modified_files),
            "untracked": len(status.untracked_files),
            "conflicted": len(status.conflicted_files),
        },
    }


def diff_to_dict(file_diff: FileDiff) -> Dict[str, Any]:
    hunks: List[Dict[str, Any]] = []
    for hunk in file_diff.hunks:
        hunks.append({
            "header": hunk.header,
            "old_start": hunk.old_start,
            "old_count": hunk.old_count,
            "new_start": hunk.new_start,
            "new_count": hunk.new_count,
            "lines": [
                {
                    "kind": line.kind.value,
                    "content": line.content,
                    "old": line.old_line_number,
                    "new": line.new_line_number,
                }
                for line in hunk.lines
            ],
        })
    return {
        "path": file_diff.path,
        **({"old_path": file_diff.old_path} if file_diff.old_path else {}),
        "binary": file_diff.is_binary,
        "additions": file_diff.additions,
        "deletions": file_diff.deletions,
        "hunks": hunks,
    }


def stats_to_dict(stats: DiffStats) -> Dict[str, Any]:
    return {
        "insertions": stats.insertions,
        "deletions": stats.deletions,
        "files": stats.files,
    }


def render(data: Dict[str, Any] | List[Dict[str, Any]]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
