"""Router identity (``/system/identity``), a single unnamed object."""
from ..schema import FieldDescriptor, ResourceSchema

SYSTEM_IDENTITY = ResourceSchema.build(
    name="system_identity",
    path="/system/identity",
    id_key="name",
    fields=[
        FieldDescriptor(
            name="name",
            required=True,
            description="Router identity.",
        ),
    ],
    update_suffix="/set",
    singleton=True,
    system=True,
)
