from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .models import MicroVM, MicroVMSpec, Volume
from .validation import ResolvedVolumeSource, resolve_volume_source, validate_spec


class Provider(ABC):
    """Base class for the providers.

    Providers are the plugins that turn the specification of a microvm into
    a running machine on a given hypervisor. The provider is the one that
    pulls the images, attaches the host devices and drives the hypervisor,
    here we only define what it gets as input.

    Example:

        Typical workflow:

            .. code-block:: python

                microvm = store.create(spec)

                provider = MyProvider(microvm)
                provider.create()

                # release the machine
                provider.delete()

        Using a context manager

            .. code-block:: python

                with MyProvider(microvm) as provider:
                    # the machine is running
                    ...
                # the machine is deleted at the end

    Args:
        microvm: the microvm to handle, its specification is validated when
            the provider is built
    """

    def __init__(self, microvm: MicroVM, name: Optional[str] = None):
        validate_spec(microvm.spec)
        self.microvm = microvm
        self.name = self.__class__.__name__ if name is None else name

    @property
    def spec(self) -> MicroVMSpec:
        return self.microvm.spec

    @property
    def root_volume(self) -> Volume:
        return self.spec.root_volumes[0]

    def resolved_volumes(self) -> List[Tuple[Volume, ResolvedVolumeSource]]:
        """Get the volumes along with where their content comes from.

        The order of the volumes in the specification is kept.
        """
        return [
            (volume, resolve_volume_source(volume.source, volume_id=volume.id))
            for volume in self.spec.volumes
        ]

    @abstractmethod
    def create(self):
        """Abstract. Create the microvm on the hypervisor."""
        pass

    @abstractmethod
    def delete(self):
        """Abstract. Delete the microvm from the hypervisor."""
        pass

    def __str__(self):
        return self.name

    def __enter__(self):
        self.create()
        return self

    def __exit__(self, *args):
        self.delete()
