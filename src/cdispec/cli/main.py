from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import yaml

from cdispec.config import Settings, load_settings
from cdispec.registry.spec_db import open_registry
from cdispec.spec.errors import SpecError
from cdispec.spec.format import Format
from cdispec.spec.naming import generate_name_for_spec
from cdispec.spec.spec import SpecDocument

logger = logging.getLogger("cdispec.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _print_yaml(title: str, payload: object) -> None:
    """Prints a human-readable YAML view of structured data."""
    print(f"\n=== {title} ===\n")
    print(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))


def _load_document(args: argparse.Namespace, settings: Settings) -> SpecDocument:
    """Reads the input spec file and wraps it with the requested output format."""
    registry = open_registry([], auto_refresh=False)
    raw = registry.read_spec(args.input)
    fmt = args.format if args.format is not None else settings.default_format
    return SpecDocument(raw, format=fmt, scratch_dir=settings.scratch_dir)


def cmd_name(args: argparse.Namespace, settings: Settings) -> None:
    """Prints the canonical file name for a spec."""
    doc = _load_document(args, settings)
    print(doc.normalize_path(generate_name_for_spec(doc.raw())))


def cmd_save(args: argparse.Namespace, settings: Settings) -> None:
    """Saves a spec to the given path, adding an extension when missing."""
    doc = _load_document(args, settings)
    doc.save(args.output)
    print(doc.normalize_path(args.output))


def cmd_print(args: argparse.Namespace, settings: Settings) -> None:
    """Streams the serialized spec to stdout."""
    doc = _load_document(args, settings)
    sys.stdout.flush()
    n = doc.write_to(sys.stdout.buffer)
    sys.stdout.buffer.flush()
    logger.info("wrote %d bytes to stdout", n)


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    """Lists the specs found in the configured spec directories."""
    dirs = args.spec_dir or list(settings.spec_dirs)
    registry = open_registry(dirs, auto_refresh=True)
    _print_yaml(
        "SPECS",
        [{"path": path, "kind": raw.kind, "devices": [d.name for d in raw.devices]} for path, raw in registry.specs.items()],
    )


def build_parser() -> argparse.ArgumentParser:
    """Builds the CLI parser."""
    p = argparse.ArgumentParser(prog="cdispec", description="Save and export CDI spec documents")
    p.add_argument("--log-level", default=None, help="Logging level (default: CDISPEC_LOG_LEVEL or WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_input_flags(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("input", help="Spec file to read (.yaml or .json)")
        sp.add_argument(
            "--format",
            choices=[f.value for f in Format],
            default=None,
            help="Output format when the target has no .yaml/.json extension",
        )

    sp_name = sub.add_parser("name", help="Print the canonical file name for a spec")
    add_input_flags(sp_name)
    sp_name.set_defaults(func=cmd_name)

    sp_save = sub.add_parser("save", help="Save a spec to a path")
    add_input_flags(sp_save)
    sp_save.add_argument("output", help="Destination path; .yaml/.json is appended when missing")
    sp_save.set_defaults(func=cmd_save)

    sp_print = sub.add_parser("print", help="Write the serialized spec to stdout")
    add_input_flags(sp_print)
    sp_print.set_defaults(func=cmd_print)

    sp_list = sub.add_parser("list", help="List specs in the spec directories")
    sp_list.add_argument(
        "--spec-dir",
        action="append",
        default=None,
        help="Spec directory, lowest priority first (repeatable; default: CDISPEC_SPEC_DIRS)",
    )
    sp_list.set_defaults(func=cmd_list)

    return p


def main(argv: Sequence[str] | None = None) -> int:
    """Runs the CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    _configure_logging(args.log_level or settings.log_level)

    try:
        args.func(args, settings)
    except SpecError as err:
        logger.debug("command %s failed", args.cmd, exc_info=True)
        print(f"error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
