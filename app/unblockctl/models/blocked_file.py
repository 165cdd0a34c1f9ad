"""Blocked file domain model.

A blocked file is a file that still carries the ``Zone.Identifier``
alternate data stream (Mark of the Web) at scan time.
"""

from dataclasses import dataclass

_SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size_bytes: int) -> str:
    """Format a byte count with up to two decimals ("1.5 KB", "512 B")."""
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {_SIZE_UNITS[unit]}"


@dataclass(frozen=True, slots=True)
class BlockedFileRecord:
    """One row of a scan result.

    Attributes:
        full_name: Absolute path of the file (unique key).
        name: File name for display.
        ext: File extension as reported by the scan.
        length: File size in bytes.
        last_write_time: Last-modified time, pre-formatted as
            ``yyyy-MM-dd HH:mm:ss``. Kept as an opaque string.
    """

    full_name: str
    name: str
    ext: str
    length: int = 0
    last_write_time: str = ""

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.full_name:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.length < 0:
            msg = f"Length cannot be negative, got {self.length}"
            raise ValueError(msg)

    @property
    def size_human(self) -> str:
        """Human-readable file size."""
        return format_bytes(self.length)

    @property
    def sort_key(self) -> str:
        """Case-insensitive ordering key (full path)."""
        return self.full_name.casefold()

    def to_dict(self) -> dict[str, str | int]:
        """Convert to a dictionary for JSON output."""
        return {
            "path": self.full_name,
            "name": self.name,
            "ext": self.ext,
            "length": self.length,
            "last_write_time": self.last_write_time,
        }
