"""Exceptions raised by Blockstage.

Most recoverable problems (missing components, failed fetches, malformed
localized values) are reported as values rather than raised. These
exceptions cover the cases that do propagate to the hosting application.
"""


class BlockstageError(Exception):
    """Base class for Blockstage errors."""


class ContentLoadError(BlockstageError):
    """Site content file could not be read or decoded."""


class SectionNotInitializedError(BlockstageError):
    """A section was rendered before its component was initialized."""

    def __init__(self, section_id: str) -> None:
        super().__init__(f"Section {section_id} rendered before initialization")
        self.section_id = section_id
