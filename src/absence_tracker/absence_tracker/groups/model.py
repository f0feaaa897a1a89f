from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Group:
    """A class group; trainees reference it by name."""

    group_id: int
    name: str
    filiere: Optional[str] = None
    annee: Optional[str] = None

    def to_dict(self) -> dict:
        return {"id": self.group_id, "name": self.name, "filiere": self.filiere, "annee": self.annee}
