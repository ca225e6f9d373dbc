"""
Tree entry domain object for gitax.
"""

import stat
from dataclasses import dataclass
from typing import Dict, Any

# Git stores these fixed type bits in tree objects
MODE_TREE = 0o040000
MODE_SYMLINK = 0o120000
MODE_GITLINK = 0o160000


def entry_kind(mode: int) -> str:
    """Classify a tree entry mode."""
    file_type = stat.S_IFMT(mode)
    if file_type == MODE_GITLINK:
        return 'submodule'
    if file_type == MODE_TREE:
        return 'tree'
    if file_type == MODE_SYMLINK:
        return 'symlink'
    if mode & 0o111:
        return 'executable'
    return 'blob'


@dataclass(frozen=True)
class TreeEntry:
    """A named node within a commit's tree."""
    path: str
    mode: int
    id: str

    @property
    def kind(self) -> str:
        return entry_kind(self.mode)

    @property
    def name(self) -> str:
        return self.path.rsplit('/', 1)[-1]

    @property
    def is_plain_file(self) -> bool:
        return self.kind == 'blob'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'mode': f"{self.mode:06o}",
            'id': self.id,
            'kind': self.kind,
        }
