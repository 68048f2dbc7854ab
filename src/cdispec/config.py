from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

import yaml  # PyYAML

from cdispec.spec.format import Format, parse_format


DEFAULT_SPEC_DIRS: Tuple[str, ...] = ("/etc/cdi", "/var/run/cdi")

ENV_CONFIG = "CDISPEC_CONFIG"
ENV_TMPDIR = "CDISPEC_TMPDIR"
ENV_FORMAT = "CDISPEC_FORMAT"
ENV_SPEC_DIRS = "CDISPEC_SPEC_DIRS"
ENV_LOG_LEVEL = "CDISPEC_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """
    Process-wide defaults for the CLI.

    Precedence (lowest to highest):
    - built-in defaults below
    - YAML file named by CDISPEC_CONFIG
    - CDISPEC_* environment variables
    """

    scratch_dir: Optional[str] = None  # None -> tempfile.gettempdir()
    default_format: Optional[Format] = None
    spec_dirs: Tuple[str, ...] = DEFAULT_SPEC_DIRS
    log_level: str = "WARNING"


def _from_mapping(base: Settings, raw: Mapping[str, object]) -> Settings:
    updates: dict[str, object] = {}

    if raw.get("scratch_dir"):
        updates["scratch_dir"] = str(raw["scratch_dir"])
    if raw.get("default_format"):
        updates["default_format"] = parse_format(str(raw["default_format"]))

    dirs = raw.get("spec_dirs")
    if isinstance(dirs, str):
        dirs = [d for d in dirs.split(os.pathsep) if d]
    if isinstance(dirs, (list, tuple)) and dirs:
        updates["spec_dirs"] = tuple(str(d) for d in dirs)

    if raw.get("log_level"):
        updates["log_level"] = str(raw["log_level"]).upper()

    return replace(base, **updates)


def _load_yaml_file(path: str) -> Mapping[str, object]:
    parsed = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config file {path!r} must contain a mapping")
    # Accept either a flat mapping or one nested under "cdispec".
    nested = parsed.get("cdispec")
    return nested if isinstance(nested, dict) else parsed


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    settings = Settings()

    config_path = env.get(ENV_CONFIG)
    if config_path:
        settings = _from_mapping(settings, _load_yaml_file(config_path))

    return _from_mapping(
        settings,
        {
            "scratch_dir": env.get(ENV_TMPDIR),
            "default_format": env.get(ENV_FORMAT),
            "spec_dirs": env.get(ENV_SPEC_DIRS),
            "log_level": env.get(ENV_LOG_LEVEL),
        },
    )
