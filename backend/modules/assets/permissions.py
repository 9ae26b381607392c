"""
Ролевая модель модуля учёта активов.

Роли: admin, manager, user. Права задаются одной таблицей
"ресурс:действие" -> роли, которым действие разрешено.
Любой маршрут проверяет право через require_permission (см. dependencies.py).
"""

from typing import Dict, FrozenSet, Optional

ALL_ROLES: FrozenSet[str] = frozenset({"admin", "manager", "user"})
EDITORS: FrozenSet[str] = frozenset({"admin", "manager"})
ADMINS: FrozenSet[str] = frozenset({"admin"})

CAPABILITIES: Dict[str, FrozenSet[str]] = {
    # Устройства
    "device:read": ALL_ROLES,
    "device:create": EDITORS,
    "device:update": EDITORS,
    "device:delete": EDITORS,
    "device:maintain": EDITORS,
    # Комплектующие
    "component:read": ALL_ROLES,
    "component:create": EDITORS,
    "component:update": EDITORS,
    "component:delete": EDITORS,
    # Сотрудники
    "employee:read": ALL_ROLES,
    "employee:create": EDITORS,
    "employee:update": EDITORS,
    "employee:delete": EDITORS,
    # Учётные записи (секреты в ответах не раскрываются)
    "account:read": ALL_ROLES,
    "account:create": EDITORS,
    "account:update": EDITORS,
    "account:delete": EDITORS,
    # Закрепление, снятие, установка и извлечение комплектующих
    "assignment:write": EDITORS,
    # Счета
    "invoice:read": ALL_ROLES,
    "invoice:create": EDITORS,
    "invoice:update": EDITORS,
    "invoice:process": EDITORS,
    "invoice:import": EDITORS,
    "invoice:delete": ADMINS,
    # Пользователи системы
    "user:read": ADMINS,
    "user:create": ADMINS,
    "user:update": ADMINS,
    "user:delete": ADMINS,
    # Отчёты
    "report:read": ALL_ROLES,
}


def allowed_roles(operation: str) -> FrozenSet[str]:
    """Роли, которым разрешена операция. Неизвестная операция -> KeyError."""
    return CAPABILITIES[operation]


def is_allowed(operation: str, role: Optional[str]) -> bool:
    """
    Проверяет, разрешена ли операция роли.

    Args:
        operation: Идентификатор "ресурс:действие"
        role: Роль пользователя или None

    Returns:
        True, если роль входит в список разрешённых
    """
    if role is None:
        return False
    return role in CAPABILITIES.get(operation, frozenset())
