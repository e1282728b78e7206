"""
Batch runner for the undecorate rewrite.

Discovers source files, rewrites them concurrently and writes back only the
files that changed. Every file gets its own parser, model and diagnostics,
so worker threads share no mutable state.

Classes:
    FileStatus: Outcome of one file in a batch run
    FileOutcome: Per-file result including diagnostics and backup path
    RunReport: Aggregated results of a run
    UndecorateRunner: Discovers, transforms and writes files

Example:
    >>> runner = UndecorateRunner(UndecorateConfig.default())
    >>> report = runner.run(["src/"])
    >>> print(report.modified, report.failed)
"""

import concurrent.futures
import fnmatch
import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .codemod.diagnostics import Diagnostic
from .codemod.pipeline import TransformStatus, transform_source
from .config import UndecorateConfig

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    """Outcome of a single file."""

    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class FileOutcome:
    path: Path
    status: FileStatus
    diagnostics: List[Diagnostic] = field(default_factory=list)
    output: Optional[str] = None
    backup_path: Optional[Path] = None
    written: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "status": self.status.value,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "backup_path": str(self.backup_path) if self.backup_path else None,
            "written": self.written,
            "error": self.error,
        }


@dataclass
class RunReport:
    files: List[FileOutcome] = field(default_factory=list)
    dry_run: bool = False

    def _count(self, status: FileStatus) -> int:
        return sum(1 for f in self.files if f.status == status)

    @property
    def modified(self) -> int:
        return self._count(FileStatus.MODIFIED)

    @property
    def unchanged(self) -> int:
        return self._count(FileStatus.UNCHANGED)

    @property
    def failed(self) -> int:
        return self._count(FileStatus.FAILED)

    @property
    def diagnostics(self) -> int:
        return sum(len(f.diagnostics) for f in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "modified": self.modified,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "diagnostics": self.diagnostics,
            "files": [f.to_dict() for f in self.files],
        }


class UndecorateRunner:
    """Runs the rewrite over files and directories."""

    def __init__(self, config: Optional[UndecorateConfig] = None):
        self.config = config or UndecorateConfig.default()
        self.settings = self.config.runner_settings

    def discover(self, paths: Iterable[str]) -> List[Path]:
        """
        Expand files and directories into the list of files to process.

        Explicitly named files are always included when their extension
        matches. Directories are searched recursively, skipping excluded
        patterns.
        """
        found: List[Path] = []
        seen = set()
        for raw in paths:
            path = Path(raw)
            if path.is_file():
                candidates = [path]
            elif path.is_dir():
                candidates = sorted(p for p in path.rglob("*") if p.is_file())
            else:
                logger.warning("Path does not exist: %s", path)
                continue
            for candidate in candidates:
                if candidate in seen or not self._matches(candidate, explicit=candidate == path):
                    continue
                seen.add(candidate)
                found.append(candidate)
        logger.info("Discovered %d files", len(found))
        return found

    def _matches(self, path: Path, explicit: bool = False) -> bool:
        if not path.name.endswith(tuple(self.settings.extensions)):
            return False
        if explicit:
            return True
        return not self._is_excluded(path)

    def _is_excluded(self, path: Path) -> bool:
        for pattern in self.settings.excluded_patterns:
            if fnmatch.fnmatch(path.name, pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in path.parts[:-1]):
                return True
        return False

    def process_file(self, path: Path) -> FileOutcome:
        """Transform a single file and write it back when it changed."""
        try:
            source = self.read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return FileOutcome(path=path, status=FileStatus.FAILED, error=str(e))

        result = transform_source(str(path), source, self.config.transform_settings)
        if result.status == TransformStatus.FAILED:
            return FileOutcome(
                path=path,
                status=FileStatus.FAILED,
                diagnostics=result.diagnostics,
                error=result.error,
            )
        if result.status == TransformStatus.UNCHANGED:
            return FileOutcome(path=path, status=FileStatus.UNCHANGED, diagnostics=result.diagnostics)

        outcome = FileOutcome(
            path=path,
            status=FileStatus.MODIFIED,
            diagnostics=result.diagnostics,
            output=result.output,
        )
        if self.settings.dry_run:
            return outcome

        try:
            outcome.backup_path = self.create_backup(path)
            self.write_source(path, result.output)
            outcome.written = True
            logger.info("Rewrote %s", path)
        except OSError as e:
            logger.warning("Failed to write %s: %s", path, e)
            outcome.status = FileStatus.FAILED
            outcome.error = str(e)
        return outcome

    def read_source(self, path: Path) -> str:
        # No newline translation: CRLF sources stay CRLF.
        with open(path, "r", encoding=self.settings.encoding, newline="") as f:
            return f.read()

    def write_source(self, path: Path, text: str) -> None:
        with open(path, "w", encoding=self.settings.encoding, newline="") as f:
            f.write(text)

    def create_backup(self, path: Path) -> Optional[Path]:
        """
        Copy ``path`` next to itself before it is overwritten.

        Returns:
            Path to the backup file or None if backups are disabled
        """
        if not self.settings.backup_enabled:
            return None
        backup_path = path.with_name(path.name + self.settings.backup_suffix)
        shutil.copy2(path, backup_path)
        logger.debug("Backup created: %s", backup_path)
        return backup_path

    def run(self, paths: Iterable[str]) -> RunReport:
        """Process every discovered file, returning outcomes in discovery order."""
        files = self.discover(paths)
        report = RunReport(dry_run=self.settings.dry_run)
        if not files:
            return report

        outcomes: Dict[Path, FileOutcome] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            future_to_path = {executor.submit(self.process_file, path): path for path in files}
            for future in concurrent.futures.as_completed(future_to_path):
                path = future_to_path[future]
                outcomes[path] = future.result()

        report.files = [outcomes[path] for path in files]
        logger.info(
            "Processed %d files: %d modified, %d unchanged, %d failed",
            len(files),
            report.modified,
            report.unchanged,
            report.failed,
        )
        return report
