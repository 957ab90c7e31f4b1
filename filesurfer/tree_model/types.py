"""Datatypes for the scanned project hierarchy."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    """One file or directory entry; directories carry nested children.

    ``path`` is the unique identifier of the entry within a tree. Files
    always have an empty ``children`` tuple.
    """

    path: str
    name: str
    is_dir: bool
    size: int = 0
    children: tuple["Node", ...] = ()

    @classmethod
    def file(cls, path: str, name: str, size: int = 0) -> "Node":
        """Build a leaf node."""
        return cls(path=path, name=name, is_dir=False, size=size)

    @classmethod
    def directory(cls, path: str, name: str, children: tuple["Node", ...] | list["Node"] = ()) -> "Node":
        """Build a directory node from an ordered child sequence."""
        return cls(path=path, name=name, is_dir=True, size=0, children=tuple(children))


Tree = tuple[Node, ...]


__all__ = ["Node", "Tree"]
