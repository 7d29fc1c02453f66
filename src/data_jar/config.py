"""JarConfig: immutable runtime configuration for a data jar.

JarConfig is a frozen (immutable) dataclass holding where the jar is
persisted, how exports are written, and how large the evaluator's parse
cache may grow.  Values are validated on construction.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["DEFAULT_STORAGE_KEY", "ENV_STORAGE_PATH", "JarConfig"]

# Name of the single persistence slot the whole tree is written to.
DEFAULT_STORAGE_KEY = "data-jar-storage"

ENV_STORAGE_PATH = "DATA_JAR_PATH"


def _default_storage_path() -> Path:
    return Path.home() / ".data-jar" / f"{DEFAULT_STORAGE_KEY}.json"


@dataclass(frozen=True, slots=True)
class JarConfig:
    """Immutable configuration for a ``DataJar``.

    Attributes:
        storage_path: JSON file holding the persisted tree.  Rewritten after
            every mutation.
        export_filename: Default file name for exported documents.
        evaluation_cache_size: Maximum number of parsed arithmetic programs
            held by each ``ExpressionEvaluator`` (>= 1).
        export_indent: Indentation used when exporting JSON text (>= 0).
    """

    storage_path: Path = field(default_factory=_default_storage_path)
    export_filename: str = "data_jar_backup.json"
    evaluation_cache_size: int = 256
    export_indent: int = 2

    def __post_init__(self) -> None:
        # Accept plain strings for convenience; frozen requires object.__setattr__.
        object.__setattr__(self, "storage_path", Path(self.storage_path))
        if not self.export_filename.strip():
            msg = "export_filename must not be blank"
            raise ValueError(msg)
        if self.evaluation_cache_size < 1:
            msg = (
                "evaluation_cache_size must be >= 1, "
                f"got {self.evaluation_cache_size}"
            )
            raise ValueError(msg)
        if self.export_indent < 0:
            msg = f"export_indent must be >= 0, got {self.export_indent}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> JarConfig:
        """Build a config, taking ``storage_path`` from ``DATA_JAR_PATH`` if set."""
        env = os.environ if environ is None else environ
        raw_path = env.get(ENV_STORAGE_PATH)
        if raw_path:
            return cls(storage_path=Path(raw_path).expanduser())
        return cls()
