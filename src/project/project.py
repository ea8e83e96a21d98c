# src/project/project.py — v1
"""Project — controls the lifecycle of a FilePipeline.

A Project built from an Assetfile fingerprints the file's content on every
``invoke_clean()`` and rebuilds the pipeline when it changed. The pipeline's
temp subdirectory is named after that fingerprint, so temp state and the
manifest are never shared between configurations; directories left by
earlier configurations are removed by ``cleanup_tmpdir()``.
"""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path

from assetpipe.config.digest import DigestAdditions, default_digest_additions
from assetpipe.logging.context import set_project_context
from assetpipe.pipeline.assetfile import build_pipeline
from assetpipe.pipeline.file_pipeline import BuildResult, FilePipeline
from assetpipe.project.fingerprint import compute_digest, digested_tmpdir_name

logger = logging.getLogger(__name__)

DEFAULT_TMPDIR_PREFIX = "assetpipe"


@dataclass
class CleanupResult:
    """Paths removed by a cleanup, and paths that could not be removed."""

    removed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class Project:
    """Owns one pipeline and rebuilds it when its Assetfile changes.

    Args:
        assetfile_or_pipeline: Path to an Assetfile, or a live pipeline to wrap.
        digest_additions: Extra tokens for the temp dir name. Defaults to the
            process-wide registry.
        tmpdir_prefix: Prefix of fingerprint-scoped temp directories.
        manifest_backend: Overrides the pipeline's manifest backend if set.
    """

    def __init__(
        self,
        assetfile_or_pipeline: str | Path | FilePipeline,
        digest_additions: DigestAdditions | None = None,
        tmpdir_prefix: str = DEFAULT_TMPDIR_PREFIX,
        manifest_backend: str | None = None,
    ) -> None:
        self._invoke_lock = threading.Lock()
        self.digest_additions = (
            digest_additions if digest_additions is not None else default_digest_additions()
        )
        self.tmpdir_prefix = tmpdir_prefix
        self.manifest_backend = manifest_backend
        self.assetfile_digest: str | None = None
        # Temp directories removed while the pipeline was last (re)built.
        self.last_cleanup = CleanupResult()

        if isinstance(assetfile_or_pipeline, FilePipeline):
            self.assetfile_path: Path | None = None
            self.pipeline = assetfile_or_pipeline
        else:
            self.assetfile_path = Path(assetfile_or_pipeline).expanduser().resolve()
            self._build_pipeline(self.assetfile_path.read_bytes())

    # --- Invocation ---

    def invoke(self) -> BuildResult:
        """Invoke the pipeline without checking the Assetfile."""
        return self.pipeline.invoke()

    def invoke_clean(self) -> BuildResult:
        """Rebuild the pipeline if the Assetfile or the digest tokens changed,
        then invoke it."""
        with self._invoke_lock:
            if self.assetfile_path is not None:
                source = self.assetfile_path.read_bytes()
                digest = compute_digest(source)
                if digest != self.assetfile_digest:
                    logger.info("Assetfile %s changed, rebuilding pipeline", self.assetfile_path)
                    self._build_pipeline(source)
                elif self._tmpdir_name_for(digest) != self.pipeline.tmpsubdir:
                    logger.info("Digest additions changed, rebuilding pipeline")
                    self._build_pipeline(source)
                set_project_context(str(self.assetfile_path), self.assetfile_digest)
            return self.pipeline.invoke_clean()

    # --- Temp directories ---

    @property
    def digested_tmpdir(self) -> str:
        """Temp subdirectory name of the current pipeline.

        Fixed when the pipeline is built, so tokens added afterwards take
        effect on the next ``invoke_clean()`` rather than renaming live state.
        A wrapped pipeline has no Assetfile digest and keeps its own name.
        """
        return self.pipeline.tmpsubdir

    def _tmpdir_name_for(self, digest: str) -> str:
        return digested_tmpdir_name(self.tmpdir_prefix, digest, self.digest_additions)

    def obsolete_tmpdirs(self) -> list[Path]:
        """Prefixed temp directories that do not belong to the current digest."""
        tmpdir = self.pipeline.tmpdir
        if not tmpdir.is_dir():
            return []
        current = self.digested_tmpdir
        return sorted(
            path
            for path in tmpdir.glob(f"{self.tmpdir_prefix}-*")
            if path.is_dir() and path.name != current
        )

    def cleanup_tmpdir(self) -> CleanupResult:
        """Remove obsolete temp directories."""
        result = _remove_all(self.obsolete_tmpdirs())
        if result.removed:
            logger.info("Removed %d obsolete temp directories", len(result.removed))
        return result

    # --- Cleaning ---

    @property
    def output_files(self) -> list[Path]:
        """Files that invoking this project generates."""
        return self.pipeline.output_files

    def files_to_clean(self) -> list[Path]:
        """Every temp directory and output file of the pipeline."""
        return [
            *self.obsolete_tmpdirs(),
            self.pipeline.tmpdir / self.digested_tmpdir,
            *self.output_files,
        ]

    def clean(self) -> CleanupResult:
        """Remove the pipeline's temporary and output files."""
        result = _remove_all(self.files_to_clean())
        logger.info(
            "Clean: %d removed, %d failed", len(result.removed), len(result.failed)
        )
        return result

    # --- Internals ---

    def _build_pipeline(self, source: bytes) -> None:
        if self.assetfile_path is None:
            raise RuntimeError("A project wrapping a live pipeline has no Assetfile")
        digest = compute_digest(source)
        pipeline = build_pipeline(source.decode("utf-8"), self.assetfile_path)
        if self.manifest_backend is not None:
            pipeline.manifest_backend = self.manifest_backend
        pipeline.tmpsubdir = self._tmpdir_name_for(digest)
        self.pipeline, self.assetfile_digest = pipeline, digest
        logger.debug("Pipeline temp subdirectory: %s", pipeline.tmpsubdir)
        self.last_cleanup = self.cleanup_tmpdir()


def _remove_all(paths: list[Path]) -> CleanupResult:
    result = CleanupResult()
    for path in paths:
        if not path.exists() and not path.is_symlink():
            continue
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
        if path.exists() or path.is_symlink():
            result.failed.append(path)
        else:
            result.removed.append(path)
    return result
