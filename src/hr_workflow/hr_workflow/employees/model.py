from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Read model of an employee as seen by the workflow.

    Employee identity is owned elsewhere; the workflow only checks existence and
    reads names for report joins.
    """

    employee_id: int
    full_name: str
    department_name: Optional[str] = None
    is_active: bool = True
