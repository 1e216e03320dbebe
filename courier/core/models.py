"""Domain records consumed from the mail backend's structured output."""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

# Glyph slots of the FLAGS column: unseen, replied, flagged.
UNSEEN_GLYPH = "✷"
REPLIED_GLYPH = "↵"
FLAGGED_GLYPH = "⚑"

_FLAG_ALIASES = {
    "seen": "Seen",
    "answered": "Answered",
    "replied": "Answered",
    "flagged": "Flagged",
    "deleted": "Deleted",
    "trashed": "Deleted",
    "draft": "Draft",
}


def normalize_flag(raw: Any) -> str:
    """Map a backend flag spelling (``\\Seen``, ``seen``, ``Replied``) to its canonical name."""
    name = str(raw).strip().lstrip("\\")
    return _FLAG_ALIASES.get(name.lower(), name)


def flag_glyphs(flags: Iterable[str]) -> str:
    """Render the three fixed glyph slots for a flag set."""
    flags = {normalize_flag(flag) for flag in flags}
    return "".join(
        [
            " " if "Seen" in flags else UNSEEN_GLYPH,
            REPLIED_GLYPH if "Answered" in flags else " ",
            FLAGGED_GLYPH if "Flagged" in flags else " ",
        ]
    )


@dataclass(frozen=True)
class Account:
    name: str
    is_default: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            name=str(data.get("name", "")),
            is_default=bool(data.get("default", data.get("is_default", False))),
        )


@dataclass(frozen=True)
class Mailbox:
    name: str
    delimiter: str = ""
    attributes: tuple = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mailbox":
        attrs = data.get("attrs", data.get("attributes")) or ()
        if isinstance(attrs, str):
            attrs = (attrs,)
        return cls(
            name=str(data.get("name", "")),
            delimiter=str(data.get("delim", data.get("delimiter")) or ""),
            attributes=tuple(str(attr) for attr in attrs),
        )

    def to_row(self) -> Dict[str, str]:
        return {
            "delim": self.delimiter,
            "name": self.name,
            "attrs": ", ".join(self.attributes),
        }


@dataclass(frozen=True)
class Envelope:
    """Summary record for one message, as listed by the backend."""

    id: str
    flags: FrozenSet[str] = frozenset()
    subject: str = ""
    sender: str = ""
    date: str = ""
    has_attachment: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Envelope":
        raw_flags = data.get("flags") or []
        if isinstance(raw_flags, str):
            raw_flags = raw_flags.split()
        return cls(
            id=str(data.get("id", "")),
            flags=frozenset(normalize_flag(flag) for flag in raw_flags),
            subject=str(data.get("subject") or ""),
            sender=str(data.get("sender") or ""),
            date=str(data.get("date") or ""),
            has_attachment=bool(
                data.get("has_attachment", data.get("hasAttachment", False))
            ),
        )

    def to_row(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "flags": flag_glyphs(self.flags),
            "subject": self.subject,
            "sender": self.sender,
            "date": self.date,
        }


@dataclass
class Draft:
    """The single in-progress composition."""

    raw_text: str
    kind: str = "write"
    source_id: Optional[str] = None
    dirty: bool = False

    def update(self, text: str) -> bool:
        """Replace the buffer content; returns True when it changed."""
        if text == self.raw_text:
            return False
        self.raw_text = text
        self.dirty = True
        return True


def records_from_payload(payload: Any) -> List[Dict[str, Any]]:
    """Coerce a ``response`` payload into a list of record mappings."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    return []
