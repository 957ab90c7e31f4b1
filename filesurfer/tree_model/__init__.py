"""Tree model for a scanned project: node datatypes, traversal, filtering.

Trees are immutable tuples of ``Node``. A rescan replaces the whole forest;
filters and git pruning derive new forests without touching the source.
"""

from __future__ import annotations

from .filtering import (
    file_extension,
    filter_tree,
    leaf_matches,
    normalize_extension,
    normalize_extensions,
)
from .git import prune_to_tracked
from .traversal import (
    all_leaf_paths,
    count_files,
    directory_paths,
    find_node,
    iter_leaves,
    iter_nodes,
    leaf_paths,
)
from .types import Node, Tree

__all__ = [
    "Node",
    "Tree",
    "iter_nodes",
    "iter_leaves",
    "leaf_paths",
    "all_leaf_paths",
    "count_files",
    "find_node",
    "directory_paths",
    "file_extension",
    "normalize_extension",
    "normalize_extensions",
    "leaf_matches",
    "filter_tree",
    "prune_to_tracked",
]
