"""chainship-cli: Command line interface for chainship."""

from __future__ import annotations

__version__ = "0.1.0"
