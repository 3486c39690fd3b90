"""DataSnap client dataset target."""

from .base import DatasetTarget

# Field default expressions are applied on Append, so nulls are written explicitly
CLIENT_DATASET_TARGET = DatasetTarget(
    key="clientdataset",
    class_name="TClientDataSet",
    uses=("Datasnap.DBClient",),
    nulls_default_unset=False,
    description="DataSnap TClientDataSet",
    aliases=("cds", "dbclient"),
)
