from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Trainee


class TraineeRepository(Protocol):
    def get_by_cef(self, cef: str) -> Optional[Trainee]:
        raise NotImplementedError

    def list_all(self, *, groupe: Optional[str] = None) -> Sequence[Trainee]:
        raise NotImplementedError

    def create(
        self,
        *,
        cef: str,
        name: str,
        first_name: str,
        groupe: str,
        phone: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, trainee: Trainee) -> bool:
        raise NotImplementedError

    def delete(self, trainee_id: int) -> bool:
        raise NotImplementedError
