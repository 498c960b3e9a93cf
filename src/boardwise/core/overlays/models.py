"""Hardware description tree and device-tree overlay fragment types."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


def normalize_node_path(path: str) -> str:
    """Canonical absolute node path: leading slash, no empty or trailing segments."""
    raw = str(path or "").strip()
    if not raw.startswith("/"):
        raise ValueError(f"Node path must be absolute: {path!r}")
    parts = [p for p in raw.split("/") if p]
    return "/" + "/".join(parts)


def is_within(path: str, ancestor: str) -> bool:
    """True if ``path`` is ``ancestor`` or one of its descendants."""
    if ancestor == "/":
        return True
    return path == ancestor or path.startswith(ancestor + "/")


class HardwareDescription:
    """A flattened device-tree: absolute node path -> property mapping.

    Parent nodes exist implicitly whenever a child node exists.
    """

    def __init__(self, nodes: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._nodes: Dict[str, Dict[str, Any]] = {"/": {}}
        for path, props in (nodes or {}).items():
            node = self._ensure_node(normalize_node_path(path))
            node.update(copy.deepcopy(dict(props or {})))

    def _ensure_node(self, path: str) -> Dict[str, Any]:
        parts = [p for p in path.split("/") if p]
        current = "/"
        for part in parts:
            current = f"{current.rstrip('/')}/{part}"
            self._nodes.setdefault(current, {})
        return self._nodes[path]

    def has_node(self, path: str) -> bool:
        return normalize_node_path(path) in self._nodes

    def node(self, path: str) -> Dict[str, Any]:
        """Return a copy of a node's properties (empty if the node is absent)."""
        return dict(self._nodes.get(normalize_node_path(path), {}))

    def get(self, path: str, prop: str, default: Any = None) -> Any:
        return self._nodes.get(normalize_node_path(path), {}).get(prop, default)

    def set(self, path: str, prop: str, value: Any) -> None:
        self._ensure_node(normalize_node_path(path))[prop] = copy.deepcopy(value)

    def delete_node(self, path: str) -> bool:
        """Remove a node and its whole subtree. Returns False if it was absent."""
        target = normalize_node_path(path)
        if target == "/":
            raise ValueError("The root node cannot be deleted")
        doomed = [p for p in self._nodes if is_within(p, target)]
        for p in doomed:
            del self._nodes[p]
        return bool(doomed)

    def paths(self) -> Iterator[str]:
        return iter(sorted(self._nodes))

    def copy(self) -> "HardwareDescription":
        clone = HardwareDescription()
        clone._nodes = copy.deepcopy(self._nodes)
        return clone

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {p: dict(sorted(self._nodes[p].items())) for p in sorted(self._nodes)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HardwareDescription):
            return NotImplemented
        return self._nodes == other._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"HardwareDescription(nodes={len(self._nodes)})"


@dataclass(frozen=True)
class OverlayWrite:
    """One (node-path, property, value) write.

    ``replace`` is None when the write inherits its fragment's marker.
    """

    path: str
    property: str
    value: Any
    replace: Optional[bool] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_node_path(self.path))


@dataclass(frozen=True)
class OverlayFragment:
    id: str
    writes: Tuple[OverlayWrite, ...] = ()
    deletes: Tuple[str, ...] = ()
    requires: Optional[str] = None
    replace: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "writes", tuple(self.writes))
        object.__setattr__(self, "deletes", tuple(normalize_node_path(p) for p in self.deletes))

    def is_replace(self, write: OverlayWrite) -> bool:
        return self.replace if write.replace is None else bool(write.replace)

    def touches(self, path: str) -> Optional[str]:
        """Return the first written node at or below ``path``, if any."""
        for w in self.writes:
            if is_within(w.path, path):
                return w.path
        return None


@dataclass(frozen=True)
class SkippedFragment:
    id: str
    reason: str


@dataclass(frozen=True)
class OverrideRecord:
    path: str
    property: str
    previous: str
    fragment: str


@dataclass(frozen=True)
class DeletionRecord:
    path: str
    fragment: str
    existed: bool = True


@dataclass
class OverlayManifest:
    """Which fragments were applied, skipped, overridden and what they deleted."""

    applied: List[str] = field(default_factory=list)
    skipped: List[SkippedFragment] = field(default_factory=list)
    overrides: List[OverrideRecord] = field(default_factory=list)
    deleted: List[DeletionRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": list(self.applied),
            "skipped": [{"id": s.id, "reason": s.reason} for s in self.skipped],
            "overrides": [
                {
                    "path": o.path,
                    "property": o.property,
                    "previous": o.previous,
                    "fragment": o.fragment,
                }
                for o in self.overrides
            ],
            "deleted": [
                {"path": d.path, "fragment": d.fragment, "existed": d.existed}
                for d in self.deleted
            ],
        }


@dataclass
class ComposedDescription:
    description: HardwareDescription
    manifest: OverlayManifest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description.to_dict(),
            "manifest": self.manifest.to_dict(),
        }


__all__ = [
    "normalize_node_path",
    "is_within",
    "HardwareDescription",
    "OverlayWrite",
    "OverlayFragment",
    "SkippedFragment",
    "OverrideRecord",
    "DeletionRecord",
    "OverlayManifest",
    "ComposedDescription",
]
