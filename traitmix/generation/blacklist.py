"""Blacklist of trait names that may never appear together.

Each rule `{trait_name, excludes}` is expanded into excluded -> subject
entries; a combination is rejected when any of its traits maps to a subject
that is also present.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ..core.errors import AmbiguousBlacklistEntry
from ..core.models import BlacklistDocument, BlacklistRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlacklistTable:
    entries: dict[str, str] = field(default_factory=dict)
    case_sensitive: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def _key(self, name: str) -> str:
        return name if self.case_sensitive else name.casefold()

    def rejects(self, trait_names: Iterable[str]) -> bool:
        present = {self._key(n) for n in trait_names}
        return any(
            partner in present
            for partner in (self.entries.get(t) for t in present)
            if partner is not None
        )


def build_blacklist(
    rules: Iterable[BlacklistRule], case_sensitive: bool = False
) -> BlacklistTable:
    """Expand blacklist rules into a lookup table.

    Raises:
        AmbiguousBlacklistEntry: If the same excluded trait appears in two rules.
    """
    entries: dict[str, str] = {}
    for rule in rules:
        subject = rule.trait_name if case_sensitive else rule.trait_name.casefold()
        for exclude in rule.excludes:
            key = exclude if case_sensitive else exclude.casefold()
            if key in entries:
                raise AmbiguousBlacklistEntry(exclude, rule.trait_name, entries[key])
            entries[key] = subject
    return BlacklistTable(entries=entries, case_sensitive=case_sensitive)


def is_rejected(table: BlacklistTable | None, trait_names: Iterable[str]) -> bool:
    if table is None:
        return False
    return table.rejects(trait_names)


def load_blacklist(
    path: Path | str, case_sensitive: bool = False
) -> BlacklistTable | None:
    """Load and build the blacklist at `path`; None if the file doesn't exist."""
    path = Path(path)
    if not path.is_file():
        logger.info("No blacklist config found at %s", path)
        return None

    document = BlacklistDocument.from_file(path)
    table = build_blacklist(document.rules, case_sensitive=case_sensitive)
    logger.info(
        "Found blacklist config of %d line(s) | trait names case sensitive: %s",
        len(document.rules),
        case_sensitive,
    )
    return table
