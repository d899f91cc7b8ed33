"""Patterns locating the declared program id in source files."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityPattern:
    """A regex plus the capture group that holds the quoted program id."""

    regex: re.Pattern[str]
    group: int

    def search(self, content: str) -> tuple[int, int, str] | None:
        """Find the first declared program id.

        Returns:
            Tuple of (start, end, program_id) or None if nothing is declared.
        """
        match = self.regex.search(content)
        if match is None or match.group(self.group) is None:
            return None
        start, end = match.span(self.group)
        return start, end, match.group(self.group)


# declare_id!("...") with an optional path prefix, e.g. anchor_lang::declare_id!
RUST_DECLARE_ID = IdentityPattern(
    regex=re.compile(r'^(([\w]+::)*)declare_id!\("(\w*)"\)', re.MULTILINE),
    group=3,
)

# declare_id('...') or declare_id("...") in Seahorse Python programs
SEAHORSE_DECLARE_ID = IdentityPattern(
    regex=re.compile(r"""^declare_id\(("|')(\w*)("|')\)""", re.MULTILINE),
    group=2,
)
