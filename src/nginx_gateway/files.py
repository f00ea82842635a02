"""Write rendered configuration files to disk."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence

from .interfaces import ConfigFile, ConfigFileManager, FileType

LOG = logging.getLogger(__name__)

REGULAR_FILE_MODE = 0o644
SECRET_FILE_MODE = 0o640


class FileManager(ConfigFileManager):
    """Own the set of files written under ``config_dir``.

    Each replacement removes the files written by the previous call that are
    not part of the new set and writes every file through a temporary file
    renamed into place, so NGINX never reads a truncated file.
    """

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = Path(config_dir)
        self._written: List[Path] = []

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def replace_files(self, files: Sequence[ConfigFile]) -> None:
        self._config_dir.mkdir(parents=True, exist_ok=True)

        targets = [self._resolve(f.path) for f in files]
        kept: List[Path] = []
        for previous in self._written:
            if previous in targets:
                kept.append(previous)
            elif previous.exists():
                previous.unlink()
                LOG.debug("Removed stale config file %s", previous)

        written: List[Path] = []
        try:
            for config_file, target in zip(files, targets):
                self._write(target, config_file)
                written.append(target)
        finally:
            # Track partial writes too, so the next call can clean them up.
            self._written = written + [p for p in kept if p not in written]
        LOG.info("Wrote %d config files to %s", len(written), self._config_dir)

    def _resolve(self, relative: str) -> Path:
        target = (self._config_dir / relative).resolve()
        if self._config_dir.resolve() not in target.parents:
            raise ValueError(f"config file path '{relative}' escapes {self._config_dir}")
        return target

    def _write(self, target: Path, config_file: ConfigFile) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        mode = SECRET_FILE_MODE if config_file.type is FileType.SECRET else REGULAR_FILE_MODE
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(config_file.content)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
