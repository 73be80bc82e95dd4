"""IPv4 addresses (``/ip/address``), an ordinary collection."""
from ..schema import FieldDescriptor, FieldMode, ResourceSchema
from .common import PROP_COMMENT, PROP_DISABLED_RW, PROP_DYNAMIC_RO, PROP_INVALID_RO

IP_ADDRESS = ResourceSchema.build(
    name="ip_address",
    path="/ip/address",
    fields=[
        FieldDescriptor(
            name="actual_interface",
            mode=FieldMode.COMPUTED,
            description="Name of the actual interface the logical one is bound to.",
        ),
        FieldDescriptor(
            name="address",
            required=True,
            description="IP address with prefix length, e.g. 192.168.88.1/24.",
        ),
        PROP_COMMENT,
        PROP_DISABLED_RW,
        PROP_DYNAMIC_RO,
        FieldDescriptor(
            name="interface",
            required=True,
            description="Name of the interface the address is assigned to.",
        ),
        PROP_INVALID_RO,
        FieldDescriptor(
            name="network",
            mode=FieldMode.COMPUTED,
            description="IP address of the network.",
        ),
    ],
    natural_key={"address": "address", "interface": "interface"},
    lookup_fields=["address"],
)
