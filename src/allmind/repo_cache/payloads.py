"""JSON payloads for snapshots and records, as served by the API and CLI."""

from __future__ import annotations

from allmind.probes.types import Commit, GitStatus, IngestionStatus, ToolMarkers
from allmind.repo_cache.types import CacheView, EntityRecord, SnapshotSummary


def _git_as_dict(git: GitStatus) -> dict[str, object]:
    if git.error is not None:
        return {"status": git.status, "error": git.error}
    return {
        "status": git.status,
        "branch": git.branch,
        "dirty": git.dirty,
        "ahead": git.ahead,
        "behind": git.behind,
        "remotes": [{"name": item.name, "url": item.url} for item in git.remotes],
    }


def _tools_as_dict(tools: ToolMarkers) -> dict[str, bool]:
    return {
        "claudeProject": tools.claude_project,
        "venv": tools.venv,
        "node": tools.node,
        "python": tools.python,
        "memory": tools.memory,
    }


def _commit_as_dict(commit: Commit) -> dict[str, str]:
    return {
        "hash": commit.hash,
        "author": commit.author,
        "date": commit.timestamp,
        "message": commit.message,
    }


def _ingestion_as_dict(status: IngestionStatus | None) -> dict[str, object] | None:
    if status is None:
        return None
    return {
        "status": status.status,
        "context": status.label,
        "files_processed": status.processed_count,
        "updated_at": status.updated_at,
    }


def _summary_as_dict(summary: SnapshotSummary) -> dict[str, int]:
    return {
        "total": summary.total,
        "present": summary.present,
        "missing": summary.missing,
        "dirty": summary.dirty,
        "gitErrors": summary.git_errors,
    }


def record_payload(record: EntityRecord) -> dict[str, object]:
    return {
        "name": record.name,
        "id": record.id,
        "scope": record.scope,
        "path": record.path,
        "exists": record.exists,
        "tags": list(record.tags),
        "status": record.status,
        "chinvex_context": record.chinvex_context,
        "shimCount": record.shim_count,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
        "git": _git_as_dict(record.git),
        "tools": _tools_as_dict(record.tools),
        "testCommand": record.test_command,
        "recentCommits": [_commit_as_dict(item) for item in record.recent_commits],
        "chinvexStatus": _ingestion_as_dict(record.ingestion),
    }


def snapshot_payload(view: CacheView) -> dict[str, object]:
    snapshot = view.snapshot
    payload: dict[str, object] = {
        "repos": [record_payload(record) for record in snapshot.records],
        "root": snapshot.root,
        "count": snapshot.count,
        "summary": _summary_as_dict(snapshot.summary()),
        "generation": snapshot.generation,
        "cached": not view.pending,
        "pending": view.pending,
        "refreshing": view.refreshing,
        "lastUpdated": view.generated_at,
        "durationMs": snapshot.duration_ms,
    }
    if snapshot.error is not None:
        payload["error"] = snapshot.error
    if view.pending:
        payload["message"] = "Cache initializing, try again in a moment"
    return payload
