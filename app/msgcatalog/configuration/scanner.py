"""Marker scanner settings."""

from pydantic import Field

from msgcatalog.configuration.base import ComponentSettings

DEFAULT_EXCLUDE_DIRS = [
    "__pycache__",
    ".git",
    ".hg",
    ".venv",
    "venv",
    "node_modules",
    "build",
    "dist",
]


class ScannerSettings(ComponentSettings):
    """Configuration for source tree scanning.

    Environment Variables:
        SCANNER_EXTENSIONS: JSON list of file extensions to scan (default: [".py"])
        SCANNER_EXCLUDE_DIRS: JSON list of directory names never descended into
        SCANNER_COMMENT_TAGS: JSON list of comment prefixes extracted as
            developer comments (default: ["TRANSLATORS:"])
        SCANNER_MAX_FILE_BYTES: Files larger than this are skipped (default: 1 MiB)
        SCANNER_FILE_TIMEOUT_SECONDS: Per-file time budget (default: 10s)
        SCANNER_MAX_WORKERS: Parallel file workers (default: 4)
    """

    extensions: list[str] = Field(
        default_factory=lambda: [".py"],
        alias="SCANNER_EXTENSIONS",
        description="File extensions to scan",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS),
        alias="SCANNER_EXCLUDE_DIRS",
        description="Directory names skipped while walking the tree",
    )
    comment_tags: list[str] = Field(
        default_factory=lambda: ["TRANSLATORS:"],
        alias="SCANNER_COMMENT_TAGS",
        description="Comment prefixes extracted as developer comments",
    )
    max_file_bytes: int = Field(
        default=1024 * 1024,
        alias="SCANNER_MAX_FILE_BYTES",
        gt=0,
        description="Size cap for a single scanned file",
    )
    file_timeout_seconds: float = Field(
        default=10.0,
        alias="SCANNER_FILE_TIMEOUT_SECONDS",
        gt=0,
        description="Time budget for scanning a single file",
    )
    max_workers: int = Field(
        default=4,
        alias="SCANNER_MAX_WORKERS",
        ge=1,
        description="Number of files scanned in parallel",
    )
