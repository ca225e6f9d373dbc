"""
History domain objects for gitax.

CommitRef is a read-only snapshot of one commit's metadata.
HistoryRecord is one row handed back to the ERP client: which file, which
commit, what the file looks like now, and where its materialized copy lives.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple

from .status import FileStatus

SHORT_SHA_LENGTH = 7

ACTION_UPDATE = "Update"


@dataclass(frozen=True)
class CommitRef:
    """Commit metadata detached from the backend objects."""
    id: str
    author: str
    message: str
    committed_at: datetime
    parents: Tuple[str, ...] = ()

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_SHA_LENGTH]

    @property
    def short_message(self) -> str:
        """First line of the commit message."""
        lines = self.message.strip().splitlines()
        return lines[0].strip() if lines else ""

    @classmethod
    def from_commit(cls, commit) -> 'CommitRef':
        """
        Build a CommitRef from a dulwich Commit.

        The committer timestamp is kept in the committer's own offset so that
        date and time of day match what the committer saw.
        """
        tz = timezone(timedelta(seconds=commit.commit_timezone))
        return cls(
            id=commit.id.decode('ascii'),
            author=commit.author.decode('utf-8', errors='replace'),
            message=commit.message.decode('utf-8', errors='replace'),
            committed_at=datetime.fromtimestamp(commit.commit_time, tz),
            parents=tuple(p.decode('ascii') for p in commit.parents),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'short_id': self.short_id,
            'author': self.author,
            'message': self.message,
            'short_message': self.short_message,
            'committed_at': self.committed_at.isoformat(),
            'parents': list(self.parents),
        }


@dataclass
class HistoryRecord:
    """
    One entry of a result collection.

    Mirrors the columns of the ERP temporary table: the repo-relative item
    path, the absolute working file, the materialized artifact (may be empty),
    commit identity and metadata, and the working file's status.
    """
    item_path: str
    internal_filename: str
    filename: str = ""
    sha: str = ""
    sha_short: str = ""
    user: str = ""
    comment: str = ""
    short_comment: str = ""
    vcs_date: Optional[date] = None
    vcs_time: int = 0  # seconds since midnight
    file_status: FileStatus = FileStatus.NON_EXISTENT
    action: str = ""

    @classmethod
    def from_commit(
        cls,
        commit: CommitRef,
        item_path: str,
        internal_filename: str,
        filename: str = "",
        file_status: FileStatus = FileStatus.NON_EXISTENT,
    ) -> 'HistoryRecord':
        """Create a record stamped with a commit's metadata."""
        when = commit.committed_at
        return cls(
            item_path=item_path,
            internal_filename=internal_filename,
            filename=filename,
            sha=commit.id,
            sha_short=commit.short_id,
            user=commit.author,
            comment=commit.message,
            short_comment=commit.short_message,
            vcs_date=when.date(),
            vcs_time=when.hour * 3600 + when.minute * 60 + when.second,
            file_status=file_status,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'item_path': self.item_path,
            'internal_filename': self.internal_filename,
            'filename': self.filename,
            'sha': self.sha,
            'sha_short': self.sha_short,
            'user': self.user,
            'comment': self.comment,
            'short_comment': self.short_comment,
            'vcs_date': self.vcs_date.isoformat() if self.vcs_date else None,
            'vcs_time': self.vcs_time,
            'file_status': self.file_status.value,
            'action': self.action,
        }

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.item_path} @ {self.sha_short or '-'} ({self.file_status.value})"
