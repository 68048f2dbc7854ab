"""Spec documents and their persistence.

- spec_types: the raw CDI spec data structures
- format: format tags and file-extension normalization
- naming: canonical spec file names derived from the spec kind
- spec: SpecDocument (save / write_to) and the new_spec() builder
"""

from .errors import NamingError, PersistenceError, SpecError, SpecIOError
from .format import Format, extension_for, normalize_path, parse_format
from .spec_types import CDISpec, ContainerEdits, Device
from .naming import generate_name_for_spec, generate_transient_name, parse_qualifier
from .spec import SpecDocument, new_spec

__all__ = [
    "CDISpec",
    "ContainerEdits",
    "Device",
    "Format",
    "NamingError",
    "PersistenceError",
    "SpecDocument",
    "SpecError",
    "SpecIOError",
    "extension_for",
    "generate_name_for_spec",
    "generate_transient_name",
    "new_spec",
    "normalize_path",
    "parse_format",
    "parse_qualifier",
]
