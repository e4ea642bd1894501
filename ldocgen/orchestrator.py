"""Run orchestration: discover files, convert them in parallel, write the mirrored tree."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional

from .config import ConfigError, LDocGenConfig, load_config
from .engine import LuaDocConverter
from .logging import get_logger, log_diagnostics
from .models import FailureKind, FileResult, RunReport, SourceFile
from .scanner import LuaFileScanner


class Orchestrator:
    """Coordinates a conversion run over a file or directory."""

    def __init__(
        self,
        converter: LuaDocConverter | None = None,
        scanner: LuaFileScanner | None = None,
        *,
        workers: Optional[int] = None,
    ) -> None:
        self._converter = converter
        self._scanner = scanner
        self.workers = workers
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        out_dir: str | Path = ".",
        files: Optional[Iterable[Path]] = None,
        *,
        config: LDocGenConfig | None = None,
    ) -> RunReport:
        """Convert every Lua file under ``path`` into ``<out_dir>/<output_dir>``.

        Raises ``ConfigError`` when ``config`` is omitted and the input's
        ``.ldocgen.yml`` is malformed.
        """
        input_path = Path(path).expanduser().resolve()
        config = config or self._load_config(input_path)
        root = input_path if input_path.is_dir() else input_path.parent
        output_root = Path(out_dir).expanduser().resolve() / config.output_dir
        self.logger.info("Starting run for %s (output: %s)", input_path, output_root)

        if files is None:
            scanner = self._scanner or LuaFileScanner(
                exclude_paths=config.exclude_paths,
                skip_dirs=[config.output_dir],
            )
            files = scanner.scan(input_path)
        targets = [
            Path(file).expanduser().resolve()
            for file in files
            if not _is_within(Path(file).expanduser().resolve(), output_root)
        ]
        self.logger.debug("Discovered %d Lua files", len(targets))

        converter = self._converter or LuaDocConverter(
            nodoc_drops_declaration=config.nodoc_drops_declaration
        )
        workers = self.workers or config.workers
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(
                pool.map(lambda target: self.process_file(target, root, output_root, converter), targets)
            )

        report = RunReport(results=results)
        self.logger.info(
            "Converted %d of %d files (%d warnings)",
            len(results) - len(report.failed),
            len(results),
            sum(result.warning_count for result in results),
        )
        return report

    def process_file(
        self, path: Path, root: Path, output_root: Path, converter: LuaDocConverter
    ) -> FileResult:
        """Convert one file; failures are recorded on the result, never raised."""
        try:
            source = read_source(path, root)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Failed to read %s: %s", path, exc)
            return FileResult(path=path, failure=FailureKind.IO, error=str(exc))
        output_path = output_root / (source.relative_path or Path(path.name))

        try:
            converted = converter.convert(source.text)
        except Exception as exc:  # pragma: no cover - defensive guard
            self._log_exception(f"Conversion failed for {path}", exc)
            return FileResult(path=path, failure=FailureKind.CONVERSION, error=str(exc))
        log_diagnostics(self.logger, path, converted.diagnostics)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(converted.text.encode("utf-8"))
        except OSError as exc:
            self.logger.warning("Failed to write %s: %s", output_path, exc)
            return FileResult(
                path=path,
                output_path=output_path,
                failure=FailureKind.IO,
                error=str(exc),
                diagnostics=converted.diagnostics,
            )

        self.logger.debug("Wrote %s", output_path)
        return FileResult(path=path, output_path=output_path, diagnostics=converted.diagnostics)

    def _load_config(self, input_path: Path) -> LDocGenConfig:
        root = input_path if input_path.is_dir() else input_path.parent
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.error("Invalid configuration in %s: %s", root, exc)
            raise

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


def format_report(report: RunReport, root: Path | None = None) -> List[str]:
    """Render one status line per file."""
    lines: List[str] = []
    for result in report.results:
        label = _display(result.path, root)
        if result.ok:
            lines.append(f"ok    {label} ({result.warning_count} warnings)")
        else:
            kind = result.failure.value if result.failure else "unknown"
            lines.append(f"FAIL  {label} [{kind}] {result.error or ''}".rstrip())
    return lines


def read_source(path: Path, root: Path) -> SourceFile:
    """Read ``path`` as strict UTF-8, remembering where it sits below ``root``."""
    return SourceFile(
        path=path,
        text=path.read_bytes().decode("utf-8"),
        relative_path=_relative_to(path, root),
    )


def _relative_to(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return Path(path.name)


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def _display(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return str(path)


__all__ = ["Orchestrator", "format_report", "read_source"]
