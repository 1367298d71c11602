"""Scaffolding for the tutorial workspace.

Writes the bundled corpus (README, docs/ and examples/) into a target
directory. Parent directories are created before each write. Files whose
bytes already match the corpus are not rewritten, so running the
scaffolder twice leaves the tree byte-identical.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

CORPUS_PACKAGE = "biceplab"
CORPUS_DIR = "corpus"


class ScaffoldError(Exception):
    """Raised when the workspace cannot be written."""

    pass


@dataclass
class ScaffoldResult:
    """Relative paths grouped by what happened to them."""

    target: Path
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def written(self) -> list[str]:
        return self.created + self.updated

    @property
    def total(self) -> int:
        return len(self.created) + len(self.updated) + len(self.unchanged)


def bundled_corpus() -> Traversable:
    """Root of the corpus shipped inside the package."""
    return resources.files(CORPUS_PACKAGE).joinpath(CORPUS_DIR)


def iter_corpus(
    root: Traversable, prefix: PurePosixPath = PurePosixPath()
) -> Iterator[tuple[PurePosixPath, Traversable]]:
    """Yield ``(relative path, resource)`` for every file below ``root``, sorted."""
    for entry in sorted(root.iterdir(), key=lambda e: e.name):
        if entry.name == "__pycache__":
            continue
        relative = prefix / entry.name
        if entry.is_dir():
            yield from iter_corpus(entry, relative)
        else:
            yield relative, entry


class Scaffolder:
    """Copy the tutorial corpus into a workspace directory."""

    def __init__(self, corpus: Traversable | Path | None = None):
        self.corpus = corpus if corpus is not None else bundled_corpus()

    def plan(self) -> list[PurePosixPath]:
        """Relative paths the scaffolder would write."""
        return [relative for relative, _ in iter_corpus(self.corpus)]

    def scaffold(self, target: Path, dry_run: bool = False) -> ScaffoldResult:
        """Write the corpus below ``target``.

        Args:
            target: Workspace directory (created if missing)
            dry_run: Report what would change without writing

        Raises:
            ScaffoldError: If a file cannot be written
        """
        target = Path(target)
        result = ScaffoldResult(target=target)

        if target.exists() and not target.is_dir():
            raise ScaffoldError(f"Target is not a directory: {target}")

        for relative, resource in iter_corpus(self.corpus):
            destination = target.joinpath(*relative.parts)
            content = resource.read_bytes()

            if destination.is_file():
                if destination.read_bytes() == content:
                    result.unchanged.append(str(relative))
                    continue
                result.updated.append(str(relative))
            else:
                result.created.append(str(relative))

            if dry_run:
                continue

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(content)
            except OSError as e:
                raise ScaffoldError(f"Failed to write {destination}: {e}") from e
            logger.debug(f"Wrote {destination}")

        return result


__all__ = ["ScaffoldError", "ScaffoldResult", "Scaffolder", "bundled_corpus", "iter_corpus"]
