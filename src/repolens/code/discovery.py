"""Discovery of reviewable source files inside a repository checkout."""

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeFile:
    """A source file selected for review."""

    path: str  # absolute path on disk
    relative_path: str  # repo-relative, forward slashes
    content: str
    extension: str
    size: int

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n"))

    @property
    def language(self) -> str:
        return FILE_TYPE_DESCRIPTIONS.get(self.extension, "code")


# Human-readable labels used in reviewer prompts
FILE_TYPE_DESCRIPTIONS = {
    ".js": "JavaScript",
    ".jsx": "React JSX",
    ".ts": "TypeScript",
    ".tsx": "React TypeScript",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".h": "C header",
    ".go": "Go",
    ".rs": "Rust",
    ".php": "PHP",
    ".rb": "Ruby",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".cs": "C#",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".less": "LESS",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".json": "JSON configuration",
    ".yaml": "YAML configuration",
    ".yml": "YAML configuration",
}

SUPPORTED_EXTENSIONS = frozenset(FILE_TYPE_DESCRIPTIONS)

IGNORED_PATHS = (
    ".git",
    "node_modules",
    "dist",
    "build",
    ".next",
    "target",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    "coverage",
    ".nyc_output",
    "logs",
    "test",
    "tests",
    "*.log",
)

MAX_FILE_SIZE = 2 * 1024 * 1024
MAX_FILES = 200
MAX_DEPTH = 20
MAX_PATH_LENGTH = 260


class FileDiscovery:
    """Select a bounded, deterministically ordered set of source files."""

    def __init__(
        self,
        max_file_size: int = MAX_FILE_SIZE,
        max_files: int = MAX_FILES,
        max_depth: int = MAX_DEPTH,
        max_path_length: int = MAX_PATH_LENGTH,
        ignored_paths: tuple[str, ...] = IGNORED_PATHS,
    ):
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.max_depth = max_depth
        self.max_path_length = max_path_length
        self.ignored_paths = ignored_paths

    def discover(self, root: Path | str) -> list[CodeFile]:
        """Collect candidate files under ``root``.

        Files are sorted by relative path before the count cap is applied, so
        the same checkout always yields the same selection.

        Args:
            root: Checkout directory

        Returns:
            At most ``max_files`` CodeFile records
        """
        root = Path(root)
        candidates: list[tuple[str, Path, int]] = []
        self._collect(root, root, 0, candidates)
        candidates.sort(key=lambda candidate: candidate[0])

        files: list[CodeFile] = []
        for relative_path, path, size in candidates:
            if len(files) >= self.max_files:
                logger.info(
                    f"File cap reached ({self.max_files}), "
                    f"skipping {len(candidates) - len(files)} remaining candidates"
                )
                break
            try:
                content = path.read_text(encoding="utf-8")
            except (UnicodeDecodeError, OSError):
                logger.info(f"Skipping unreadable file: {relative_path}")
                continue

            files.append(
                CodeFile(
                    path=str(path),
                    relative_path=relative_path,
                    content=content,
                    extension=path.suffix.lower(),
                    size=size,
                )
            )

        logger.info(f"Found {len(files)} code files")
        return files

    def _collect(
        self,
        directory: Path,
        root: Path,
        depth: int,
        out: list[tuple[str, Path, int]],
    ) -> None:
        if depth > self.max_depth:
            logger.warning(f"Max depth reached, not descending into {directory}")
            return

        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list {directory}: {e}")
            return

        for entry in entries:
            relative_path = entry.relative_to(root).as_posix()
            if self.is_ignored(relative_path):
                continue
            if len(relative_path) > self.max_path_length or entry.is_symlink():
                continue

            if entry.is_dir():
                self._collect(entry, root, depth + 1, out)
            elif entry.is_file():
                if entry.suffix.lower() not in SUPPORTED_EXTENSIONS:
                    continue
                size = entry.stat().st_size
                if size > self.max_file_size:
                    logger.info(f"Skipping large file: {relative_path} ({size // 1024}KB)")
                    continue
                out.append((relative_path, entry, size))

    def is_ignored(self, relative_path: str) -> bool:
        """Check whether any segment of a repo-relative path is excluded."""
        parts = relative_path.split("/")
        for pattern in self.ignored_paths:
            if "*" in pattern:
                if any(fnmatch.fnmatch(part, pattern) for part in parts):
                    return True
            elif pattern in parts:
                return True
        return False
