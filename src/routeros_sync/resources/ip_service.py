"""IP services (``/ip/service``).

Every service (ssh, www-ssl, ...) always exists on the device; it is
addressed by name and changed in place with ``/ip/service/set``. A device
item looks like::

    {
        ".id": "*6",
        "address": "",
        "certificate": "https-cert",
        "disabled": "false",
        "invalid": "false",
        "name": "www-ssl",
        "port": "443",
        "tls-version": "any",
        "vrf": "main"
    }

https://help.mikrotik.com/docs/display/ROS/Services
"""
from ..schema import (
    FieldDescriptor,
    FieldKind,
    FieldMode,
    FilterGate,
    ResourceSchema,
    always_present_not_user_provided,
    empty_equals,
    int_at_least,
    int_between,
    string_in,
)
from .common import PROP_DISABLED_RW, PROP_DYNAMIC_RO, PROP_INVALID_RO, PROP_VRF_RW

SERVICE_NAMES = ("api", "api-ssl", "ftp", "ssh", "telnet", "winbox", "www", "www-ssl")

IP_SERVICE = ResourceSchema.build(
    name="ip_service",
    path="/ip/service",
    id_key="name",
    fields=[
        FieldDescriptor(
            name="address",
            default="",
            description="List of IP/IPv6 prefixes from which the service is accessible.",
            diff_suppress=empty_equals("0.0.0.0/0"),
        ),
        FieldDescriptor(
            name="certificate",
            description="The name of the certificate used by a particular service. Applicable "
                        "only for services that depend on certificates (www-ssl, api-ssl).",
            diff_suppress=always_present_not_user_provided,
        ),
        PROP_DISABLED_RW,
        PROP_DYNAMIC_RO,
        PROP_INVALID_RO,
        FieldDescriptor(
            name="max_sessions",
            kind=FieldKind.INTEGER,
            description="Maximum number of concurrent connections to a particular service. "
                        "Available from RouterOS 7.16.",
            validator=int_at_least(1),
            diff_suppress=always_present_not_user_provided,
        ),
        FieldDescriptor(
            name="name",
            mode=FieldMode.COMPUTED,
            description="Service name.",
        ),
        FieldDescriptor(
            name="numbers",
            kind=FieldKind.ENUM,
            mode=FieldMode.WRITE_ONLY,
            required=True,
            description="The name of the service whose settings will be changed.",
            validator=string_in(SERVICE_NAMES),
        ),
        FieldDescriptor(
            name="port",
            kind=FieldKind.INTEGER,
            required=True,
            description="The port particular service listens on.",
            validator=int_between(1, 65535),
        ),
        FieldDescriptor(
            name="proto",
            mode=FieldMode.COMPUTED,
        ),
        FieldDescriptor(
            name="tls_version",
            kind=FieldKind.ENUM,
            description="Specifies which TLS versions to allow by a particular service.",
            validator=string_in(["any", "only-1.2"]),
            diff_suppress=always_present_not_user_provided,
        ),
        PROP_VRF_RW,
    ],
    natural_key={"name": "numbers"},
    # RouterOS 7.19 adds dynamic per-VRF service entries next to the static ones
    filter_gates=[FilterGate("dynamic", "false", min_version="7.19")],
    lookup_fields=["name"],
    update_suffix="/set",
    singleton=True,
    system=True,
)
