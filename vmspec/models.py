"""
.. _models:

The data model of a microvm.

A :py:class:`~vmspec.models.MicroVMSpec` is the declarative description of a
microvm (kernel, sizing, network interfaces, volumes) a client submits. Once
accepted, the control plane wraps it into a :py:class:`~vmspec.models.MicroVM`
which adds an identifier and a version used as an optimistic concurrency
token.

All the objects know how to dump themselves to their JSON representation
(``to_dict``) and how to load themselves back (``from_dictionary``). Optional
fields are ``None`` when absent and are omitted from the JSON representation.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .configuration import BaseConfiguration
from .constants import DEFAULT_HOST_PATH_TYPE, HOST_PATH_RAW_FILE
from .errors import InvalidVMID
from .schema import MICROVM_SCHEMA, SPEC_SCHEMA, VMSpecValidator

#: Reference to an OCI image (registry/repository:tag or digest form)
ContainerImage = str


def _none_if_empty(value):
    # "" and 0 are how an absent optional value looks like on the wire
    if value == "" or value == 0:
        return None
    return value


class VMID(str):
    """Identifier of a microvm.

    Raises:
        InvalidVMID: the value is not a non-empty string
    """

    def __new__(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise InvalidVMID(value)
        return super().__new__(cls, value)

    @classmethod
    def generate(cls) -> "VMID":
        return cls(uuid.uuid4().hex)


class HostPathType(str, Enum):
    RAW_FILE = HOST_PATH_RAW_FILE


@dataclass
class Kernel:
    """The kernel found at ``filename`` inside the container ``image``.

    ``cmdline`` is None when the provider's default command line must be used.
    """

    image: ContainerImage = ""
    filename: str = ""
    cmdline: Optional[str] = None

    def __post_init__(self):
        self.cmdline = _none_if_empty(self.cmdline)

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "Kernel":
        return cls(
            image=dictionary["image"],
            filename=dictionary["filename"],
            cmdline=dictionary.get("cmdline"),
        )

    def to_dict(self) -> Dict:
        d = dict(image=self.image, filename=self.filename)
        if self.cmdline is not None:
            d.update(cmdline=self.cmdline)
        return d


@dataclass
class NetworkInterface:
    host_device_name: str = ""
    allow_metadata_requests: bool = False
    guest_mac: Optional[str] = None
    guest_device_name: Optional[str] = None

    def __post_init__(self):
        self.guest_mac = _none_if_empty(self.guest_mac)
        self.guest_device_name = _none_if_empty(self.guest_device_name)

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "NetworkInterface":
        return cls(
            host_device_name=dictionary["host_device_name"],
            allow_metadata_requests=dictionary.get("allow_mmds", False),
            guest_mac=dictionary.get("guest_mac"),
            guest_device_name=dictionary.get("guest_device_name"),
        )

    def to_dict(self) -> Dict:
        d: Dict = {}
        if self.allow_metadata_requests:
            d.update(allow_mmds=True)
        if self.guest_mac is not None:
            d.update(guest_mac=self.guest_mac)
        d.update(host_device_name=self.host_device_name)
        if self.guest_device_name is not None:
            d.update(guest_device_name=self.guest_device_name)
        return d


@dataclass
class ContainerVolumeSource:
    image: ContainerImage = ""

    def to_dict(self) -> Dict:
        return dict(image=self.image)


@dataclass
class HostPathVolumeSource:
    path: str = ""
    type: HostPathType = HostPathType.RAW_FILE

    def __post_init__(self):
        self.type = HostPathType(self.type)

    def to_dict(self) -> Dict:
        return dict(path=self.path, type=self.type.value)


@dataclass
class VolumeSource:
    """Where the content of a volume comes from.

    Exactly one of ``container`` and ``host_path`` must be set, see
    :py:func:`~vmspec.validation.resolve_volume_source`.
    """

    container: Optional[ContainerVolumeSource] = None
    host_path: Optional[HostPathVolumeSource] = None

    @classmethod
    def from_container(cls, image: ContainerImage) -> "VolumeSource":
        return cls(container=ContainerVolumeSource(image=image))

    @classmethod
    def from_host_path(
        cls, path: str, type: HostPathType = HostPathType.RAW_FILE
    ) -> "VolumeSource":
        return cls(host_path=HostPathVolumeSource(path=path, type=type))

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "VolumeSource":
        container = dictionary.get("container")
        if container is not None:
            container = ContainerVolumeSource(image=container["image"])
        host_path = dictionary.get("host_path")
        if host_path is not None:
            host_path = HostPathVolumeSource(
                path=host_path["path"],
                type=host_path.get("type", DEFAULT_HOST_PATH_TYPE),
            )
        return cls(container=container, host_path=host_path)

    def to_dict(self) -> Dict:
        d = {}
        if self.container is not None:
            d.update(container=self.container.to_dict())
        if self.host_path is not None:
            d.update(host_path=self.host_path.to_dict())
        return d


@dataclass
class Volume:
    """A block device attached to the microvm.

    ``size`` (in MB) asks the provider to resize the backing store, None
    keeps the native size of the source.
    """

    id: str = ""
    mount_point: str = ""
    source: VolumeSource = field(default_factory=VolumeSource)
    is_root: bool = False
    is_read_only: bool = False
    partition_id: Optional[str] = None
    size: Optional[int] = None

    def __post_init__(self):
        self.partition_id = _none_if_empty(self.partition_id)
        self.size = _none_if_empty(self.size)

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "Volume":
        return cls(
            id=dictionary["id"],
            mount_point=dictionary["mount_point"],
            source=VolumeSource.from_dictionary(dictionary["source"]),
            is_root=dictionary.get("is_root", False),
            is_read_only=dictionary.get("is_read_only", False),
            partition_id=dictionary.get("partition_id"),
            size=dictionary.get("size"),
        )

    def to_dict(self) -> Dict:
        d: Dict = dict(id=self.id, is_root=self.is_root)
        if self.is_read_only:
            d.update(is_read_only=True)
        d.update(mount_point=self.mount_point, source=self.source.to_dict())
        if self.partition_id is not None:
            d.update(partition_id=self.partition_id)
        if self.size is not None:
            d.update(size=self.size)
        return d


@dataclass
class MicroVMSpec(BaseConfiguration):
    """Specification of a microvm.

    Examples:

        .. code-block:: python

            spec = MicroVMSpec(
                kernel=Kernel(image="docker.io/org/kernel:5.10", filename="vmlinux"),
                vcpu=2,
                memory_in_mb=512,
            )
            spec.add_volume(
                id="root",
                is_root=True,
                mount_point="/",
                source=VolumeSource.from_host_path("/var/lib/vm/root.img"),
            )
            spec.add_network_interface(host_device_name="tap0")
    """

    _SCHEMA = SPEC_SCHEMA
    _VALIDATOR_FUNC = VMSpecValidator

    kernel: Kernel
    vcpu: int
    memory_in_mb: int
    initrd_image: Optional[ContainerImage] = None
    network_interfaces: List[NetworkInterface] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)

    def __post_init__(self):
        self.initrd_image = _none_if_empty(self.initrd_image)

    @classmethod
    def from_dictionary(cls, dictionary: Mapping, validate: bool = True):
        if validate:
            cls.validate(dictionary)
        return cls(
            kernel=Kernel.from_dictionary(dictionary["kernel"]),
            vcpu=int(dictionary["vcpu"]),
            memory_in_mb=int(dictionary["memory_inmb"]),
            initrd_image=dictionary.get("initrd_image"),
            network_interfaces=[
                NetworkInterface.from_dictionary(n)
                for n in dictionary.get("network_interfaces") or []
            ],
            volumes=[
                Volume.from_dictionary(v) for v in dictionary.get("volumes") or []
            ],
        )

    def to_dict(self) -> Dict:
        d: Dict = dict(kernel=self.kernel.to_dict())
        if self.initrd_image is not None:
            d.update(initrd_image=self.initrd_image)
        d.update(
            vcpu=self.vcpu,
            memory_inmb=self.memory_in_mb,
            network_interfaces=[n.to_dict() for n in self.network_interfaces],
            volumes=[v.to_dict() for v in self.volumes],
        )
        return d

    def add_volume_conf(self, volume: Volume):
        self.volumes.append(volume)
        return self

    def add_volume(self, **kwargs):
        self.volumes.append(Volume(**kwargs))
        return self

    def add_network_interface_conf(self, network_interface: NetworkInterface):
        self.network_interfaces.append(network_interface)
        return self

    def add_network_interface(self, **kwargs):
        self.network_interfaces.append(NetworkInterface(**kwargs))
        return self

    @property
    def root_volumes(self) -> List[Volume]:
        return [v for v in self.volumes if v.is_root]


@dataclass
class MicroVM(BaseConfiguration):
    """A microvm as tracked by the control plane.

    ``id`` never changes once assigned; ``version`` is bumped by the store on
    every accepted replacement of ``spec``.
    """

    _SCHEMA = MICROVM_SCHEMA
    _VALIDATOR_FUNC = VMSpecValidator

    id: VMID
    version: int
    spec: MicroVMSpec

    def __post_init__(self):
        if not isinstance(self.id, VMID):
            self.id = VMID(self.id)

    @classmethod
    def from_dictionary(cls, dictionary: Mapping, validate: bool = True):
        if validate:
            cls.validate(dictionary)
        return cls(
            id=VMID(dictionary["id"]),
            version=int(dictionary["version"]),
            spec=MicroVMSpec.from_dictionary(dictionary["spec"], validate=False),
        )

    def to_dict(self) -> Dict:
        return dict(id=str(self.id), version=self.version, spec=self.spec.to_dict())
