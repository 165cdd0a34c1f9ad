"""Extension allowlist.

The allowlist bounds which files a scan reports and an unblock touches.
Entries are lower-cased, dot-prefixed extensions kept sorted and
deduplicated case-insensitively.
"""

import logging
from collections.abc import Iterable, Iterator

from unblockctl.core.errors import EmptyAllowlistError, InvalidExtensionError

logger = logging.getLogger(__name__)

# Preview-friendly formats; Office documents are opt-in.
DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".bmp",
    ".csv",
    ".gif",
    ".jpeg",
    ".jpg",
    ".json",
    ".log",
    ".md",
    ".pdf",
    ".png",
    ".tif",
    ".tiff",
    ".tsv",
    ".txt",
    ".xml",
)

OFFICE_EXTENSIONS: tuple[str, ...] = (".docx", ".xlsx", ".pptx")


def normalize_extension(raw: str) -> str:
    """Normalize a raw extension string.

    Args:
        raw: User-supplied extension, e.g. " .PDF ".

    Returns:
        The trimmed, lower-cased extension (".pdf").

    Raises:
        InvalidExtensionError: If the value is empty, lacks a leading dot,
            or is a bare dot.
    """
    value = raw.strip().lower()
    if not value:
        msg = "Extension cannot be empty"
        raise InvalidExtensionError(msg)
    if not value.startswith("."):
        msg = f"Extension must start with '.': {raw.strip()!r}"
        raise InvalidExtensionError(msg)
    if value == ".":
        msg = "Extension must have at least one character after '.'"
        raise InvalidExtensionError(msg)
    return value


def _sorted_unique(extensions: Iterable[str]) -> list[str]:
    seen: dict[str, str] = {}
    for ext in extensions:
        seen.setdefault(ext.strip().casefold(), ext.strip().lower())
    return sorted(seen.values())


def toggle_office_formats(enabled: bool, current: Iterable[str]) -> list[str]:
    """Add or remove the Office formats from an extension collection.

    Enabling is idempotent. Disabling removes exactly the three Office
    extensions (in any case) and leaves every other entry untouched.

    Args:
        enabled: True to add ``.docx``, ``.xlsx`` and ``.pptx``.
        current: Current extensions.

    Returns:
        New sorted list of extensions.
    """
    if enabled:
        return _sorted_unique([*current, *OFFICE_EXTENSIONS])
    office = {ext.casefold() for ext in OFFICE_EXTENSIONS}
    return _sorted_unique(ext for ext in current if ext.strip().casefold() not in office)


def effective_set(checked: Iterable[str]) -> tuple[str, ...]:
    """Build the extension snapshot used by a scan or unblock.

    Entries that fail normalization are skipped with a warning.

    Args:
        checked: Extensions currently selected by the user.

    Returns:
        Sorted tuple of normalized extensions.

    Raises:
        EmptyAllowlistError: If no valid extension is selected.
    """
    normalized: list[str] = []
    for raw in checked:
        try:
            normalized.append(normalize_extension(raw))
        except InvalidExtensionError as e:
            logger.warning("Ignoring allowlist entry: %s", e)

    result = tuple(_sorted_unique(normalized))
    if not result:
        msg = "Select at least one allowed extension"
        raise EmptyAllowlistError(msg)
    return result


class ExtensionAllowlist:
    """Owned, ordered set of allowed extensions.

    The presentation layer reads and writes the allowlist only through
    these accessors; operations work on :meth:`snapshot` copies.

    Example:
        >>> allowlist = ExtensionAllowlist([".pdf"])
        >>> allowlist.set_office_formats(True)
        >>> allowlist.entries
        ['.docx', '.pdf', '.pptx', '.xlsx']
    """

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self._entries = _sorted_unique(normalize_extension(e) for e in extensions)

    @property
    def entries(self) -> list[str]:
        """Sorted copy of the current entries."""
        return list(self._entries)

    @property
    def office_enabled(self) -> bool:
        """Check if all Office formats are present."""
        return all(self.contains(ext) for ext in OFFICE_EXTENSIONS)

    def contains(self, extension: str) -> bool:
        """Check membership case-insensitively."""
        return extension.strip().casefold() in {e.casefold() for e in self._entries}

    def add(self, extension: str) -> str:
        """Add an extension and return its normalized form."""
        value = normalize_extension(extension)
        self._entries = _sorted_unique([*self._entries, value])
        return value

    def remove(self, extension: str) -> bool:
        """Remove an extension.

        Returns:
            True if the extension was present.
        """
        key = extension.strip().casefold()
        remaining = [e for e in self._entries if e.casefold() != key]
        removed = len(remaining) != len(self._entries)
        self._entries = remaining
        return removed

    def set_office_formats(self, enabled: bool) -> None:
        """Apply the bulk Office toggle."""
        self._entries = toggle_office_formats(enabled, self._entries)

    def snapshot(self) -> tuple[str, ...]:
        """Return the validated, immutable extension set for one operation.

        Raises:
            EmptyAllowlistError: If the allowlist is empty.
        """
        return effective_set(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


def parse_extension_list(raw: str) -> list[str]:
    """Split a comma-separated extension list (``".pdf,.TXT"``).

    Raises:
        InvalidExtensionError: If any non-blank entry is malformed.
    """
    return [normalize_extension(part) for part in raw.split(",") if part.strip()]
