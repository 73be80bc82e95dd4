"""Generic resource synchronizer.

One ``ResourceSynchronizer`` drives read / create / update / delete / import
for any object type described by a ``ResourceSchema``:

    context = await SyncContext.connect(client, channel_factory)
    services = ResourceSynchronizer(IP_SERVICE, context)

    record = DeclaredRecord({"numbers": "ssh", "port": 2222})
    record = await services.create(record)

The caller must not run two operations on the same instance concurrently.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .channel import CommandChannel
from .diff import FieldChange, diff_record
from .errors import DataConsistencyError, NotFoundError, TransportError, ValidationError
from .resolver import lookup_filter, require_resolved, resolve
from .schema import (
    DeclaredRecord,
    DeviceItem,
    InstanceState,
    ResourceSchema,
    from_device,
    to_device,
)
from .transport.base import Client, Transport
from .utils.logging_config import timed
from .version import DeviceVersion

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[], Awaitable[CommandChannel]]


@dataclass
class SyncContext:
    """Per-device session state shared by all synchronizers.

    The device version travels with the context instead of living in a
    module-level global.
    """
    client: Client
    version: DeviceVersion
    channel_factory: Optional[ChannelFactory] = None

    @classmethod
    async def connect(
        cls,
        client: Client,
        channel_factory: Optional[ChannelFactory] = None,
    ) -> "SyncContext":
        """Ask the device for its version and build a context.

        Raises:
            ParseError: If the reported version cannot be parsed
        """
        raw = await client.get_version()
        version = DeviceVersion(raw)
        logger.info(f"{client.host} runs RouterOS {raw}")
        return cls(client=client, version=version, channel_factory=channel_factory)


class ResourceSynchronizer:
    """CRUD engine parameterized by a field descriptor set."""

    def __init__(self, schema: ResourceSchema, context: SyncContext):
        self.schema = schema
        self.context = context

    @property
    def client(self) -> Client:
        return self.context.client

    # --- Filters ---

    def build_filter(self, values: dict[str, Any], partial: bool = False) -> dict[str, str]:
        """Natural-key clauses plus every version gate the device supports.

        With ``partial`` only the key fields that are set become clauses,
        as when an object is imported by a single key value.

        Raises:
            ValidationError: A natural key field is not set
        """
        filter: dict[str, str] = {}
        missing = []
        for attribute, field_name in self.schema.natural_key.items():
            descriptor = self.schema.fields[field_name]
            value = values.get(field_name)
            if value is None:
                missing.append(field_name)
                continue
            filter[attribute] = descriptor.encode(value)

        if missing and (not partial or not filter):
            raise ValidationError(
                [f"Missing natural key field: {name}" for name in missing]
            )

        for gate in self.schema.filter_gates:
            if gate.applies(self.context.version):
                filter[gate.attribute] = gate.value

        return filter

    # --- Read ---

    def _adopt(self, record: DeclaredRecord, item: DeviceItem) -> DeclaredRecord:
        record.id = item.get(self.schema.id_key)
        record.values = from_device(self.schema, item, record.values)
        record.state = InstanceState.PRESENT_SYNCED
        return record

    def _forget(self, record: DeclaredRecord) -> DeclaredRecord:
        logger.info(f"{self.schema.path} {record.id or record.values} no longer exists")
        record.id = None
        record.state = InstanceState.ABSENT
        return record

    async def _read_filtered(self, record: DeclaredRecord, filter: dict[str, str]) -> DeclaredRecord:
        items = await self.client.get(self.schema.path, filter)

        if len(items) == 0:
            return self._forget(record)
        if len(items) > 1:
            raise DataConsistencyError(self.schema.path, filter, len(items))
        return self._adopt(record, items[0])

    @timed("read")
    async def read(self, record: DeclaredRecord) -> DeclaredRecord:
        """Refresh a record from the device.

        Zero matches clear the identifier and mark the record absent
        without raising.

        Raises:
            DataConsistencyError: More than one object matched
            ParseError: The device version is unusable for filter gating
        """
        if self.schema.singleton and not self.schema.natural_key:
            items = await self.client.get(self.schema.path)
            if not items:
                return self._forget(record)
            return self._adopt(record, items[0])

        return await self._read_filtered(record, self.build_filter(record.values))

    # --- Create / update ---

    async def _write(self, record: DeclaredRecord) -> DeclaredRecord:
        values = record.values
        if record.state is not InstanceState.ABSENT:
            # Read back from the device, so computed fields are populated
            values = self.schema.writable_values(values)
        self.schema.validate(values)
        item = to_device(self.schema, values)
        path = self.schema.path

        if self.schema.singleton:
            # Named singletons are changed in place with a "set" action
            if self.client.transport is Transport.REST:
                path = path + self.schema.update_suffix
            await self.client.post(path, item)
        elif record.id:
            item[".id"] = record.id
            await self.client.set(path, item)
        else:
            record.id = await self.client.add(path, item)

        record.state = InstanceState.PRESENT_UNSYNCED
        record = await self.read(record)
        if record.state is InstanceState.ABSENT:
            raise NotFoundError(f"{self.schema.path} {values} did not persist on the device")
        return record

    @timed("create")
    async def create(self, record: DeclaredRecord) -> DeclaredRecord:
        """Write the declared record and refresh it from the device.

        Raises:
            ValidationError: A declared field is invalid
            NotFoundError: The confirming read found nothing
        """
        return await self._write(record)

    @timed("update")
    async def update(self, record: DeclaredRecord) -> DeclaredRecord:
        """Same operation as ``create``: the device upserts by natural key."""
        return await self._write(record)

    # --- Delete ---

    @timed("delete")
    async def delete(self, record: DeclaredRecord) -> DeclaredRecord:
        """Remove the instance. Deleting an absent instance succeeds."""
        if not record.id:
            record.state = InstanceState.DELETED
            return record

        if self.schema.system:
            logger.warning(
                f"{self.schema.path} {record.id} is a system object and cannot be "
                "removed; forgetting it locally"
            )
        else:
            try:
                await self.client.remove(self.schema.path, record.id)
            except NotFoundError:
                logger.info(f"{self.schema.path} {record.id} was already removed")

        record.id = None
        record.state = InstanceState.DELETED
        return record

    # --- Import ---

    async def _resolve_over_channel(self, key_value: Any) -> str:
        if self.context.channel_factory is None:
            raise NotFoundError(
                f"{self.schema.path} {key_value} not found and no command channel is configured"
            )

        candidates = [lookup_filter(f, key_value) for f in self.schema.lookup_fields]
        channel = await self.context.channel_factory()
        try:
            identifier = await resolve(channel, self.schema.path, candidates)
        finally:
            await channel.close()

        return require_resolved(identifier, self.schema.path)

    @timed("import")
    async def import_(self, key_value: Any) -> DeclaredRecord:
        """Adopt an existing object given only its natural-key value.

        Falls back to resolving the internal id over the command channel
        when the filtered read cannot find the object.

        Only the primary key field is known, so composite keys are matched
        on that field alone.

        Raises:
            IdentifierUnresolved: Every console lookup failed
            NotFoundError: Nothing found and no command channel available
            ValidationError: The object type has no natural key
        """
        if not self.schema.natural_key:
            raise ValidationError([f"{self.schema.name} has no natural key to import by"])
        record = DeclaredRecord({self.schema.key_field(): key_value})

        try:
            filter = self.build_filter(record.values, partial=True)
            record = await self._read_filtered(record, filter)
        except TransportError as e:
            # Older firmware may reject the filter outright
            logger.warning(f"Filtered read of {self.schema.path} failed: {e}")
            record.state = InstanceState.ABSENT

        if record.state is InstanceState.PRESENT_SYNCED:
            return record

        logger.info(f"Resolving {self.schema.path} {key_value} over the command channel")
        internal_id = await self._resolve_over_channel(key_value)

        record = await self._read_filtered(record, {".id": internal_id})
        if record.state is not InstanceState.PRESENT_SYNCED:
            raise NotFoundError(f"{self.schema.path} {internal_id} vanished during import")
        return record

    # --- Drift ---

    @timed("diff")
    async def diff(self, record: DeclaredRecord) -> list[FieldChange]:
        """Significant differences between the declared and live state."""
        live = await self.read(DeclaredRecord(dict(record.values), record.id))
        if live.state is InstanceState.ABSENT:
            raise NotFoundError(f"{self.schema.path} {record.values} does not exist")
        return diff_record(self.schema, record.values, live.values)
