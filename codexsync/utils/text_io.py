"""Byte-faithful text file helpers.

``newline=""`` disables newline translation so CRLF documents round-trip
unchanged through read, rewrite and write.
"""

from __future__ import annotations

from pathlib import Path


def read_text(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
