"""
Workspace - centralized path resolution for paylink.

A Workspace is the root directory holding configuration, exported documents
and the outbox. All paths are computed relative to this root.

Resolution priority:
1. Explicit path (--data-dir CLI option)
2. PAYLINK_DATA environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Workspace:
    """Root directory for all paylink paths."""

    root: Path

    @classmethod
    def resolve(cls, explicit: Path | None = None) -> Workspace:
        """Resolve workspace root from explicit path, env var, or CWD."""
        if explicit is not None:
            return cls(root=explicit)
        env = os.environ.get("PAYLINK_DATA")
        if env:
            return cls(root=Path(env))
        return cls(root=Path.cwd())

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def settings_path(self) -> Path:
        return self.config_dir / "paylink.yml"

    @property
    def data_dir(self) -> Path:
        return self.root / "data"

    @property
    def outbox_dir(self) -> Path:
        return self.root / "outbox"


__all__ = ["Workspace"]
