"""FireDAC in-memory table target."""

from .base import DatasetTarget

FIREDAC_TARGET = DatasetTarget(
    key="firedac",
    class_name="TFDMemTable",
    uses=("FireDAC.Comp.Client",),
    nulls_default_unset=True,
    description="FireDAC TFDMemTable",
    aliases=("fdmemtable", "fd"),
)
