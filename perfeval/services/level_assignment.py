from typing import Dict, Iterable, Optional, Tuple

from perfeval.schemas.records import EmployeeRecord, LevelRecord

# HR form-type code -> (level code, level name). Closed set; not configurable per tenant.
FORM_TYPE_LEVELS: Dict[int, Tuple[str, str]] = {
    433930001: ("OPEADM", "Operativo Administrativo"),
    433930000: ("TACT", "Táctico"),
    433930003: ("ESTR", "Estratégico"),
    433930002: ("OPE", "Operativo"),
}


def resolve_level(employee: EmployeeRecord, levels: Iterable[LevelRecord]) -> Optional[LevelRecord]:
    """
    Level an employee is evaluated at, derived from their form-type code.

    Matches the catalog by level code first and by level name second, both
    case-insensitively. Returns None when the employee has no code, the code
    is unknown, or no catalog level matches; the caller then asks for a manual
    choice.
    """
    if employee.form_type is None:
        return None

    target = FORM_TYPE_LEVELS.get(employee.form_type)
    if target is None:
        return None

    code, name = target
    levels = list(levels)
    by_code = next((lvl for lvl in levels if (lvl.code or "").casefold() == code.casefold()), None)
    if by_code is not None:
        return by_code
    return next((lvl for lvl in levels if (lvl.name or "").casefold() == name.casefold()), None)
