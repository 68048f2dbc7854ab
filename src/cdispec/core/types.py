from __future__ import annotations

import os
from typing import Any, Dict, Union


JSON = Dict[str, Any]

# Anything accepted where a filesystem path is expected.
StrPath = Union[str, os.PathLike]

# Highest spec version this package knows how to emit.
CURRENT_CDI_VERSION = "0.6.0"
