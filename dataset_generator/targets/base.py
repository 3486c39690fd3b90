"""
Dataset target families.

A target decides only how the generated code names and builds its dataset:
the component class, the units to import and how unset fields behave. It
never changes which values are written.
"""

from dataclasses import dataclass, field
from typing import Tuple

# Units every generated unit needs regardless of the target
BASE_USES: Tuple[str, ...] = (
    "System.Classes",
    "System.SysUtils",
    "System.Variants",
    "Data.DB",
)


@dataclass(frozen=True)
class DatasetTarget:
    """Naming and construction details of one in-memory dataset component."""

    key: str
    class_name: str
    uses: Tuple[str, ...] = ()
    # True when fields left unassigned after Append read back as Null
    nulls_default_unset: bool = True
    description: str = ""
    aliases: Tuple[str, ...] = field(default=(), compare=False)

    def construction(self, variable: str = "ds", owner: str = "aOwner") -> str:
        """Statement that instantiates the dataset."""
        return f"{variable} := {self.class_name}.Create({owner});"

    def unit_uses(self) -> Tuple[str, ...]:
        """Minimal uses list for a unit targeting this dataset."""
        units = list(BASE_USES)
        for unit in self.uses:
            if unit not in units:
                units.append(unit)
        return tuple(units)
