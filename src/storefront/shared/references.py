"""Tagged references between aggregates.

A record that points at another aggregate is rendered either as a bare
``Reference`` (just the id) or as an ``Expanded`` record. The caller picks
the variant explicitly instead of the shape depending on how the record was
loaded.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Reference:
    id: str

    kind = "reference"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "id": self.id}


@dataclass(frozen=True)
class Expanded:
    id: str
    record: dict[str, Any]

    kind = "expanded"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "id": self.id, **self.record}


def reference_to(identifier) -> Reference | None:
    if identifier is None:
        return None
    return Reference(id=str(identifier))


def expand(identifier, loader) -> Reference | Expanded | None:
    """Resolve ``identifier`` through ``loader`` into an ``Expanded`` record.

    ``loader`` returns a dict for the referenced aggregate or ``None`` when it
    no longer exists, in which case the plain ``Reference`` is returned so the
    dangling id stays visible.
    """
    if identifier is None:
        return None
    record = loader(str(identifier))
    if record is None:
        return Reference(id=str(identifier))
    return Expanded(id=str(identifier), record=record)


def reference_id(value) -> str | None:
    """Return the id carried by either variant (or a raw id)."""
    if value is None:
        return None
    if isinstance(value, (Reference, Expanded)):
        return value.id
    return str(value)
