# spec_db.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import yaml

from cdispec.core.types import StrPath
from cdispec.spec.errors import PersistenceError
from cdispec.spec.format import EXT_JSON, EXT_YAML, file_extension, has_supported_extension
from cdispec.spec.spec_types import CDISpec

logger = logging.getLogger(__name__)

DEFAULT_SPEC_EXT = EXT_YAML
SPEC_DIR_MODE = 0o755


def encode_spec(raw: CDISpec, path: str) -> bytes:
    """Serializes a spec for the file at path; .json gets compact JSON, anything else YAML."""
    if file_extension(path) == EXT_JSON:
        return json.dumps(raw.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    text = yaml.safe_dump(raw.to_dict(), sort_keys=False, allow_unicode=True, explicit_start=True)
    return text.encode("utf-8")


def decode_spec(data: bytes) -> CDISpec:
    # JSON is a subset of YAML, so one loader covers both extensions.
    parsed = yaml.safe_load(data.decode("utf-8")) or {}
    if not isinstance(parsed, dict):
        raise ValueError(f"spec document must be a mapping, got {type(parsed).__name__}")
    return CDISpec.from_dict(parsed)


class SpecRegistry(Protocol):
    """Defines the persistence contract used by SpecDocument.save()."""

    @property
    def spec_dirs(self) -> tuple[str, ...]: ...

    def write_spec(self, raw: CDISpec, name: str) -> None: ...
    def read_spec(self, path: StrPath) -> CDISpec: ...
    def refresh(self) -> None: ...


class RegistryFactory(Protocol):
    def __call__(self, spec_dirs: Sequence[StrPath], *, auto_refresh: bool = False) -> SpecRegistry: ...


class FileSpecRegistry:
    """Persists spec documents into a set of directories on disk.

    Directories are ordered by increasing priority and writes always land in
    the last one. Each write goes through a private temp file in the target
    directory followed by os.replace(), so readers only ever see complete
    files.
    """

    def __init__(self, spec_dirs: Sequence[StrPath], *, auto_refresh: bool = False) -> None:
        self._spec_dirs: tuple[str, ...] = tuple(os.fspath(d) for d in spec_dirs)
        self.auto_refresh = bool(auto_refresh)
        self.specs: dict[str, CDISpec] = {}
        if self.auto_refresh:
            self.refresh()

    @property
    def spec_dirs(self) -> tuple[str, ...]:
        return self._spec_dirs

    def _highest_priority_dir(self) -> str:
        if not self._spec_dirs:
            return ""
        return self._spec_dirs[-1]

    # --------------------
    # Write
    # --------------------
    def write_spec(self, raw: CDISpec, name: str) -> None:
        spec_dir = self._highest_priority_dir()
        if not spec_dir:
            raise PersistenceError("no spec directories to write to", op="write_spec", path=name)

        path = os.path.join(spec_dir, name)
        if not has_supported_extension(path):
            path += DEFAULT_SPEC_EXT

        try:
            data = encode_spec(raw, path)
        except (yaml.YAMLError, TypeError, ValueError) as err:
            raise PersistenceError(f"failed to encode spec: {err}", op="write_spec", path=path) from err

        try:
            self._write_atomic(path, data)
        except OSError as err:
            raise PersistenceError(
                f"failed to write spec: {err.strerror or err}", op="write_spec", path=path
            ) from err

        logger.debug("wrote spec %s (%d bytes)", path, len(data))
        if self.auto_refresh:
            self.refresh()

    @staticmethod
    def _write_atomic(path: str, data: bytes) -> None:
        spec_dir = os.path.dirname(path) or "."
        os.makedirs(spec_dir, mode=SPEC_DIR_MODE, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=spec_dir, prefix="spec.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    # --------------------
    # Read
    # --------------------
    def read_spec(self, path: StrPath) -> CDISpec:
        p = Path(path)
        try:
            data = p.read_bytes()
        except OSError as err:
            raise PersistenceError(
                f"failed to read spec: {err.strerror or err}", op="read_spec", path=str(p)
            ) from err
        try:
            return decode_spec(data)
        except (yaml.YAMLError, UnicodeDecodeError, ValueError) as err:
            raise PersistenceError(f"failed to parse spec: {err}", op="read_spec", path=str(p)) from err

    def refresh(self) -> None:
        """Rescans the spec directories and indexes every spec file by path.

        Files that fail to parse are skipped with a warning; a later directory
        does not shadow an earlier one's files since they are keyed by path.
        """
        found: dict[str, CDISpec] = {}
        for spec_dir in self._spec_dirs:
            d = Path(spec_dir)
            if not d.is_dir():
                continue
            for p in sorted(d.iterdir()):
                if not has_supported_extension(p.name) or not p.is_file():
                    continue
                try:
                    found[str(p)] = self.read_spec(p)
                except PersistenceError as err:
                    logger.warning("skipping unreadable spec: %s", err)
        self.specs = found


def open_registry(spec_dirs: Sequence[StrPath], *, auto_refresh: bool = False) -> FileSpecRegistry:
    return FileSpecRegistry(spec_dirs, auto_refresh=auto_refresh)


class MemorySpecRegistry:
    """Stores written specs in memory for unit tests.

    Each write is recorded as (spec_dir, name, raw). Set fail_with to make
    write_spec raise that exception instead.
    """

    def __init__(self, spec_dirs: Sequence[StrPath] = (), *, auto_refresh: bool = False) -> None:
        self._spec_dirs = tuple(os.fspath(d) for d in spec_dirs)
        self.auto_refresh = auto_refresh
        self.writes: list[tuple[str, str, CDISpec]] = []
        self.fail_with: BaseException | None = None
        self.refresh_count = 0

    @property
    def spec_dirs(self) -> tuple[str, ...]:
        return self._spec_dirs

    def write_spec(self, raw: CDISpec, name: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        spec_dir = self._spec_dirs[-1] if self._spec_dirs else ""
        self.writes.append((spec_dir, name, raw))

    def read_spec(self, path: StrPath) -> CDISpec:
        p = os.fspath(path)
        for spec_dir, name, raw in reversed(self.writes):
            if os.path.join(spec_dir, name) == p:
                return raw
        raise PersistenceError("no such spec", op="read_spec", path=p)

    def refresh(self) -> None:
        self.refresh_count += 1
