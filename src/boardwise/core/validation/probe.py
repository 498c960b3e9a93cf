"""Read-only access to sysfs/procfs under a configurable root.

Validators never open absolute paths directly; they go through a Probe so
the same code runs against the live system (``root="/"``) or a fake tree
built in a test directory.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class Probe:
    def __init__(self, root: Path | str = "/") -> None:
        self.root = Path(root)

    def path(self, rel: str) -> Path:
        """Map an absolute system path (``/sys/...``) under the probe root."""
        return self.root / str(rel).lstrip("/")

    def exists(self, rel: str) -> bool:
        return self.path(rel).exists()

    def read_text(self, rel: str, default: Optional[str] = None) -> Optional[str]:
        """File contents with NULs and surrounding whitespace removed."""
        p = self.path(rel)
        try:
            raw = p.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return default
        return raw.decode("utf-8", errors="replace").replace("\x00", "").strip()

    def read_int(self, rel: str, default: Optional[int] = None) -> Optional[int]:
        text = self.read_text(rel)
        if text is None:
            return default
        try:
            return int(text.split()[0])
        except (ValueError, IndexError):
            return default

    def list_dir(self, rel: str) -> List[str]:
        """Sorted entry names of a directory (empty if absent)."""
        p = self.path(rel)
        if not p.is_dir():
            return []
        return sorted(child.name for child in p.iterdir())

    def glob(self, rel_dir: str, pattern: str) -> List[str]:
        """Sorted absolute-style paths under ``rel_dir`` matching ``pattern``."""
        base = self.path(rel_dir)
        if not base.is_dir():
            return []
        prefix = "/" + str(rel_dir).strip("/")
        return sorted(f"{prefix}/{p.name}" for p in base.glob(pattern))

    def __repr__(self) -> str:
        return f"Probe(root={str(self.root)!r})"


__all__ = ["Probe"]
