"""
Tree walking for gitax.

Walks a commit tree snapshot depth-first and yields the plain files that
pass a caller-supplied predicate. Directories, executables, symlinks and
submodule links never qualify on their own.
"""

import fnmatch
import stat
from typing import Callable, Iterable, Iterator, Optional

from dulwich.objects import Tree

from ..domain.tree import TreeEntry

Predicate = Callable[[TreeEntry], bool]


def extension_filter(patterns: Iterable[str]) -> Predicate:
    """
    Build a predicate matching entry names against glob patterns.

    Matching is case-insensitive, so '*.xpo' also accepts 'Form.XPO'.

    Example:
        walk_tree(handle.lookup, tree, extension_filter(['*.xpo']))
    """
    lowered = [p.lower() for p in patterns]

    def matches(entry: TreeEntry) -> bool:
        name = entry.name.lower()
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in lowered)

    return matches


def walk_tree(
    lookup: Callable[[bytes], object],
    tree: Tree,
    predicate: Optional[Predicate] = None,
    recursive: bool = True,
    prefix: str = "",
) -> Iterator[TreeEntry]:
    """
    Yield the plain files of a tree, depth-first.

    Sub-trees are descended at the point their entry is met, so files of a
    folder come out before the files of the folder's later siblings.

    Args:
        lookup: Object lookup by id (e.g. RepositoryHandle.lookup)
        tree: Tree to walk
        predicate: Inclusion test; None accepts every plain file
        recursive: Descend into sub-trees
        prefix: Path of `tree` relative to the repository root

    Yields:
        TreeEntry for every matching plain file
    """
    for name, mode, sha in tree.items():
        path = prefix + name.decode('utf-8')
        entry = TreeEntry(path=path, mode=mode, id=sha.decode('ascii'))

        if entry.kind == 'tree':
            if recursive:
                yield from walk_tree(lookup, lookup(sha), predicate, recursive, path + '/')
            continue

        if not entry.is_plain_file:
            continue

        if predicate is None or predicate(entry):
            yield entry


def subtree(lookup: Callable[[bytes], object], tree: Tree, folder: str) -> Optional[Tree]:
    """Tree object at folder (relative path) inside tree, or None."""
    current = tree
    for part in [p for p in folder.strip('/').split('/') if p and p != '.']:
        try:
            mode, sha = current[part.encode('utf-8')]
        except KeyError:
            return None
        if not stat.S_ISDIR(mode):
            return None
        current = lookup(sha)
    return current
