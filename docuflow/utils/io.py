# utils/io.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml

# -------- Path helpers --------
PathLike = Union[str, Path]


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path."""
    return p if isinstance(p, Path) else Path(p)


def ensure_parent(path: PathLike) -> Path:
    """Ensure parent directory exists for a file path."""
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def list_files(folder: PathLike, pattern: str = "*") -> list[Path]:
    """List regular files matching a glob pattern (non-recursive), sorted by name."""
    return sorted((p for p in to_path(folder).glob(pattern) if p.is_file()), key=lambda p: p.name)


# -------- Text / JSON / YAML --------
def read_text(path: PathLike, encoding: str = "utf-8") -> str:
    """Read a whole text file."""
    return to_path(path).read_text(encoding=encoding)


def write_text(path: PathLike, text: str, encoding: str = "utf-8") -> Path:
    """Write text atomically (via temp file then replace)."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(text, encoding=encoding)
    tmp.replace(p)
    return p


def dumps_pretty(data: Any, indent: int = 2) -> str:
    """Pretty-printed JSON text, non-ASCII kept as is."""
    return json.dumps(data, ensure_ascii=False, indent=indent)


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically, pretty-formatted."""
    return write_text(path, dumps_pretty(data, indent=indent) + "\n")


def read_yaml(path: PathLike) -> Any:
    """Load a YAML document."""
    with to_path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)
