import unittest

from vmspec.models import Kernel, MicroVMSpec, VolumeSource

KERNEL_IMAGE = "docker.io/org/kernel:5.10"
ROOT_IMAGE = "/var/lib/vm/root.img"


def root_spec(**kwargs) -> MicroVMSpec:
    """A valid specification: one root volume from a host file."""
    spec = MicroVMSpec(
        kernel=Kernel(image=KERNEL_IMAGE, filename="vmlinux"),
        vcpu=kwargs.pop("vcpu", 2),
        memory_in_mb=kwargs.pop("memory_in_mb", 512),
        **kwargs,
    )
    spec.add_volume(
        id="root",
        is_root=True,
        mount_point="/",
        source=VolumeSource.from_host_path(ROOT_IMAGE),
    )
    return spec


class VMSpecTest(unittest.TestCase):
    pass
