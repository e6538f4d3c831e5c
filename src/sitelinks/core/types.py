"""Core type definitions."""

from collections.abc import Mapping
from typing import TypeAlias

# Canonical content path (e.g., "pages/about.md") -> absolute permalink.
# Owned by the site build; only ever read here.
PermalinkTable: TypeAlias = Mapping[str, str]
