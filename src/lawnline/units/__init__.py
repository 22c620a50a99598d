"""Defender type registry with auto-discovery.

Import this package to access the full registry::

    from lawnline.units import get_type, all_types, cost_table

    shooter = get_type("peashooter")   # -> Peashooter class
    print(shooter.stats.cost)          # 100
    print(len(all_types()))            # 6

The registry is populated at import time by walking every submodule
under ``lawnline.units`` and collecting concrete ``DefenderType``
subclasses.
"""

from __future__ import annotations

import importlib
import pkgutil
from typing import Optional

from lawnline.units.base import DefenderRole, DefenderStats, DefenderType

__all__ = [
    "DefenderType",
    "DefenderStats",
    "DefenderRole",
    "get_type",
    "all_types",
    "placeable_type_ids",
    "cost_table",
    "tool_palette",
    "types_with_role",
]

# ---------------------------------------------------------------------------
# Internal registry
# ---------------------------------------------------------------------------
_registry: dict[str, type[DefenderType]] = {}


def _discover() -> None:
    """Walk all subpackages and register concrete DefenderType subclasses."""
    package = importlib.import_module("lawnline.units")
    _walk(package.__path__, package.__name__)


def _walk(path: list[str], prefix: str) -> None:
    for _importer, modname, _ispkg in pkgutil.walk_packages(path, prefix + "."):
        mod = importlib.import_module(modname)
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            if (
                isinstance(obj, type)
                and issubclass(obj, DefenderType)
                and obj is not DefenderType
                and hasattr(obj, "type_id")
            ):
                _registry[obj.type_id] = obj


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_type(type_id: str) -> Optional[type[DefenderType]]:
    """Return the DefenderType class for *type_id*, or ``None``."""
    return _registry.get(type_id)


def all_types() -> list[type[DefenderType]]:
    """Return every registered DefenderType class (stable order by type_id)."""
    return [_registry[k] for k in sorted(_registry)]


def placeable_type_ids() -> set[str]:
    """type_ids the player may place from the tool bar."""
    return {tid for tid, cls in _registry.items() if cls.placeable}


def cost_table() -> dict[str, int]:
    """Fixed mapping of type_id -> placement cost."""
    return {tid: cls.stats.cost for tid, cls in sorted(_registry.items())}


def tool_palette() -> list[dict]:
    """Placeable types in cost order, as the tool bar shows them."""
    placeable = [cls for cls in all_types() if cls.placeable]
    return [
        {
            "type_id": cls.type_id,
            "name": cls.display_name,
            "icon": cls.icon,
            "cost": cls.stats.cost,
        }
        for cls in sorted(placeable, key=lambda c: (c.stats.cost, c.type_id))
    ]


def types_with_role(role: DefenderRole) -> list[type[DefenderType]]:
    return [cls for cls in all_types() if cls.role is role]


_discover()
