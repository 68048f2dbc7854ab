"""cdispec: crash-safe persistence for container device interface specs."""

from cdispec.spec import Format, SpecDocument, new_spec

__all__ = ["Format", "SpecDocument", "new_spec"]
