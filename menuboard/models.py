"""View-model types for menus and their uploaded files."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path

from .daterange import format_day

UNKNOWN_DATE = "Unknown date"

_PDF_CONTENT_TYPE = "application/pdf"


class FileKind(Enum):
    PDF = "PDF"
    IMAGE = "IMG"


class AggregateType(Enum):
    PDF = "PDF"
    IMAGE = "IMG"
    MIXED = "MIXED"


class RoleSlot(Enum):
    """The three fixed upload slots, in display order."""

    FOOD = "food"
    DRINK = "drink"
    SPA = "spa"

    @property
    def field_name(self) -> str:
        """Name of the wire/form field carrying this slot's file."""
        return f"{self.value}MenuFile"


_SLOT_ORDER: dict[RoleSlot, int] = {slot: i for i, slot in enumerate(RoleSlot)}


def infer_kind(name: str, content_type: str | None = None) -> FileKind:
    """PDF if the filename ends in .pdf (any case) or the type says so."""
    if name.lower().endswith(".pdf"):
        return FileKind.PDF
    if content_type and content_type.split(";")[0].strip() == _PDF_CONTENT_TYPE:
        return FileKind.PDF
    return FileKind.IMAGE


def classify(files) -> AggregateType:
    """Derive the aggregate type of a collection of MenuFiles.

    An empty collection is reported as IMAGE.
    """
    kinds = {f.kind for f in files}
    if FileKind.PDF in kinds and FileKind.IMAGE in kinds:
        return AggregateType.MIXED
    if kinds == {FileKind.PDF}:
        return AggregateType.PDF
    return AggregateType.IMAGE


def format_size(size_bytes: int) -> str:
    """Format a byte count the way menu cards show it, e.g. "0.7MB"."""
    return f"{size_bytes / (1024 * 1024):.1f}MB"


@dataclass(frozen=True)
class MenuFile:
    """One uploaded artifact attached to a menu slot."""

    name: str
    kind: FileKind
    url: str
    role_slot: RoleSlot
    size_bytes: int = 0
    qr_url: str = ""

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be non-negative: {self.size_bytes}")


@dataclass(frozen=True)
class Menu:
    """A named collection of up to three slot files plus metadata."""

    id: str
    name: str
    files: tuple[MenuFile, ...] = ()
    created_at: datetime | None = None
    description: str = ""
    category: str = ""
    qr_target_url: str | None = None

    def __post_init__(self) -> None:
        slots = [f.role_slot for f in self.files]
        if len(slots) != len(set(slots)):
            raise ValueError(f"duplicate slot in menu {self.id!r}: {slots}")
        # Keep slot order stable regardless of construction order
        ordered = tuple(sorted(self.files, key=lambda f: _SLOT_ORDER[f.role_slot]))
        object.__setattr__(self, "files", ordered)

    @property
    def aggregate_type(self) -> AggregateType:
        return classify(self.files)

    @property
    def total_size_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def file_for(self, slot: RoleSlot) -> MenuFile | None:
        for f in self.files:
            if f.role_slot is slot:
                return f
        return None

    def with_file(self, new_file: MenuFile) -> Menu:
        """Return a copy with ``new_file`` occupying its slot.

        A file already in that slot is replaced.
        """
        kept = tuple(f for f in self.files if f.role_slot is not new_file.role_slot)
        return replace(self, files=kept + (new_file,))

    def without_slot(self, slot: RoleSlot) -> Menu:
        return replace(self, files=tuple(f for f in self.files if f.role_slot is not slot))

    @property
    def size_label(self) -> str:
        return format_size(self.total_size_bytes)

    @property
    def date_label(self) -> str:
        if self.created_at is None:
            return UNKNOWN_DATE
        return format_day(self.created_at)

    def summary(self) -> str:
        """One-line card caption: type, date and size."""
        return f"{self.aggregate_type.value} • {self.date_label} • {self.size_label}"


@dataclass
class UploadFile:
    """A local file about to be sent in a create/update form."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def kind(self) -> FileKind:
        return infer_kind(self.filename, self.content_type)

    @classmethod
    def from_path(cls, path: str | Path) -> UploadFile:
        """Read a file from disk, guessing its content type.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"File not found: {p}")
        content_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        return cls(filename=p.name, content=p.read_bytes(), content_type=content_type)


@dataclass
class MenuForm:
    """Payload of a create or update submission."""

    name: str
    files: dict[RoleSlot, UploadFile] = field(default_factory=dict)
    review_link: str = ""
    description: str = ""
    category: str = ""

    def attached(self) -> list[tuple[RoleSlot, UploadFile]]:
        """Attached files in slot order."""
        return [(slot, self.files[slot]) for slot in RoleSlot if slot in self.files]
