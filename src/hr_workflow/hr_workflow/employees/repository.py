from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only view of employee identity.

    Note: services depend on this interface only; nothing in the workflow writes
    employees.
    """

    def exists(self, employee_id: int) -> bool:
        raise NotImplementedError

    def get_name(self, employee_id: int) -> Optional[str]:
        raise NotImplementedError

    def get(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError
