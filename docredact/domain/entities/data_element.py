"""
ConfiguredDataElement Entity

A schema entry describing a field expected for a document type. Elements are
supplied by the configuration provider and never mutated by the pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class DataElementAction(str, Enum):
    EXTRACT = "Extract"
    REDACT = "Redact"
    EXTRACT_AND_REDACT = "ExtractAndRedact"

    @classmethod
    def parse(cls, raw: Any) -> DataElementAction:
        """Accept the enum value or loose spellings such as ``extract_and_redact``."""
        if isinstance(raw, cls):
            return raw
        key = "".join(ch for ch in str(raw or "") if ch.isalnum()).lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return cls.EXTRACT


@dataclass(frozen=True)
class ConfiguredDataElement:
    """Immutable configured data element."""

    id: str
    name: str
    type: str = "Text"
    category: str = "General"
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    action: DataElementAction = DataElementAction.EXTRACT
    required: bool = False

    def __post_init__(self):
        if not str(self.id or "").strip():
            raise ValueError("id must not be empty")
        if not str(self.name or "").strip():
            raise ValueError("name must not be empty")
        object.__setattr__(self, 'aliases', tuple(str(a) for a in (self.aliases or ()) if str(a).strip()))
        object.__setattr__(self, 'action', DataElementAction.parse(self.action))

    @property
    def redacts(self) -> bool:
        return self.action in (DataElementAction.REDACT, DataElementAction.EXTRACT_AND_REDACT)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ConfiguredDataElement:
        return cls(
            id=str(data.get('id') or data.get('name') or ''),
            name=str(data.get('name') or ''),
            type=str(data.get('type') or 'Text'),
            category=str(data.get('category') or 'General'),
            aliases=tuple(data.get('aliases') or ()),
            action=data.get('action', DataElementAction.EXTRACT),
            required=bool(data.get('required', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'category': self.category,
            'aliases': list(self.aliases),
            'action': self.action.value,
            'required': self.required,
        }
