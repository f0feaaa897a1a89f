from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group


class GroupRepository(Protocol):
    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Group]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Group]:
        raise NotImplementedError

    def create(self, *, name: str, filiere: Optional[str] = None, annee: Optional[str] = None) -> int:
        raise NotImplementedError

    def update(self, group: Group) -> bool:
        raise NotImplementedError

    def delete(self, group_id: int) -> bool:
        raise NotImplementedError
