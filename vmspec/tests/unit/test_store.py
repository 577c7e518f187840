import threading

from vmspec.constants import INITIAL_VERSION
from vmspec.errors import (
    DuplicateVMID,
    InvalidResourceSizing,
    MicroVMNotFound,
    MissingRootVolume,
    VersionConflict,
)
from vmspec.lifecycle import MicroVMState
from vmspec.models import VMID, MicroVM
from vmspec.store import MicroVMStore

from . import VMSpecTest, root_spec


class TestMicroVMStore(VMSpecTest):
    def setUp(self):
        self.store = MicroVMStore()

    def test_create(self):
        microvm = self.store.create(root_spec())
        self.assertIsInstance(microvm.id, VMID)
        self.assertEqual(INITIAL_VERSION, microvm.version)
        self.assertEqual(root_spec(), microvm.spec)
        self.assertEqual(MicroVMState.REGISTERED, self.store.state(microvm.id))
        self.assertIn(microvm.id, self.store)
        self.assertEqual(1, len(self.store))

    def test_create_with_id(self):
        microvm = self.store.create(root_spec(), vmid="vm-1")
        self.assertEqual("vm-1", microvm.id)
        with self.assertRaises(DuplicateVMID):
            self.store.create(root_spec(), vmid="vm-1")

    def test_create_invalid(self):
        spec = root_spec()
        spec.volumes = []
        with self.assertRaises(MissingRootVolume):
            self.store.create(spec)
        self.assertEqual(0, len(self.store))

    def test_create_rejects_volume_size(self):
        for size in (-5, 2**31):
            spec = root_spec()
            spec.volumes[0].size = size
            with self.assertRaises(InvalidResourceSizing):
                self.store.create(spec)
        self.assertEqual(0, len(self.store))

    def test_created_microvm_round_trips(self):
        spec = root_spec()
        spec.volumes[0].size = 2**31 - 1
        microvm = self.store.create(spec)
        self.assertEqual(microvm, MicroVM.from_dictionary(microvm.to_dict()))

    def test_create_normalizes(self):
        spec = root_spec()
        spec.add_network_interface(
            host_device_name="tap0", guest_mac="AA-BB-CC-DD-EE-FF"
        )
        microvm = self.store.create(spec)
        self.assertEqual(
            "aa:bb:cc:dd:ee:ff", microvm.spec.network_interfaces[0].guest_mac
        )

    def test_get_is_a_copy(self):
        microvm = self.store.create(root_spec())
        microvm.spec.vcpu = 64
        microvm.version = 42
        stored = self.store.get(microvm.id)
        self.assertEqual(2, stored.spec.vcpu)
        self.assertEqual(INITIAL_VERSION, stored.version)

    def test_create_copies_the_spec(self):
        spec = root_spec()
        microvm = self.store.create(spec)
        spec.vcpu = 64
        self.assertEqual(2, self.store.get(microvm.id).spec.vcpu)

    def test_get_unknown(self):
        with self.assertRaises(MicroVMNotFound):
            self.store.get("unknown")
        with self.assertRaises(MicroVMNotFound):
            self.store.state("unknown")
        self.assertNotIn("unknown", self.store)
        self.assertNotIn("", self.store)

    def test_update(self):
        microvm = self.store.create(root_spec())
        updated = self.store.update(
            microvm.id, root_spec(vcpu=4), expected_version=microvm.version
        )
        self.assertEqual(microvm.id, updated.id)
        self.assertEqual(microvm.version + 1, updated.version)
        self.assertEqual(4, updated.spec.vcpu)
        self.assertEqual(MicroVMState.UPDATED, self.store.state(microvm.id))

        again = self.store.update(microvm.id, root_spec(vcpu=8), updated.version)
        self.assertEqual(microvm.version + 2, again.version)
        self.assertEqual(again, self.store.get(microvm.id))

    def test_update_stale_version(self):
        microvm = self.store.create(root_spec())
        self.store.update(microvm.id, root_spec(vcpu=4), microvm.version)
        with self.assertRaises(VersionConflict) as ctx:
            self.store.update(microvm.id, root_spec(vcpu=8), microvm.version)
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(microvm.version, ctx.exception.expected)
        self.assertEqual(microvm.version + 1, ctx.exception.actual)
        self.assertEqual(4, self.store.get(microvm.id).spec.vcpu)

    def test_update_invalid(self):
        microvm = self.store.create(root_spec())
        spec = root_spec()
        spec.volumes[0].is_root = False
        with self.assertRaises(MissingRootVolume):
            self.store.update(microvm.id, spec, microvm.version)
        self.assertEqual(microvm, self.store.get(microvm.id))

    def test_update_unknown(self):
        with self.assertRaises(MicroVMNotFound):
            self.store.update("unknown", root_spec(), INITIAL_VERSION)

    def test_concurrent_updates(self):
        microvm = self.store.create(root_spec())
        barrier = threading.Barrier(2)
        results = []

        def update(vcpu):
            barrier.wait()
            try:
                results.append(
                    self.store.update(microvm.id, root_spec(vcpu=vcpu), microvm.version)
                )
            except VersionConflict as err:
                results.append(err)

        threads = [threading.Thread(target=update, args=(vcpu,)) for vcpu in (4, 8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        conflicts = [r for r in results if isinstance(r, VersionConflict)]
        successes = [r for r in results if not isinstance(r, VersionConflict)]
        self.assertEqual(1, len(conflicts))
        self.assertEqual(1, len(successes))
        self.assertEqual(microvm.version + 1, successes[0].version)
        self.assertEqual(successes[0], self.store.get(microvm.id))

    def test_delete(self):
        microvm = self.store.create(root_spec(), vmid="vm-1")
        self.store.update(microvm.id, root_spec(vcpu=4), microvm.version)
        deleted = self.store.delete(microvm.id)
        self.assertEqual(microvm.version + 1, deleted.version)
        self.assertNotIn(microvm.id, self.store)
        self.assertEqual(MicroVMState.DELETED, self.store.state(microvm.id))
        with self.assertRaises(MicroVMNotFound):
            self.store.get(microvm.id)
        with self.assertRaises(MicroVMNotFound):
            self.store.delete(microvm.id)
        # identifiers are never reused
        with self.assertRaises(DuplicateVMID):
            self.store.create(root_spec(), vmid="vm-1")

    def test_delete_with_version(self):
        microvm = self.store.create(root_spec())
        self.store.update(microvm.id, root_spec(vcpu=4), microvm.version)
        with self.assertRaises(VersionConflict):
            self.store.delete(microvm.id, expected_version=microvm.version)
        self.assertIn(microvm.id, self.store)
        self.store.delete(microvm.id, expected_version=microvm.version + 1)
        self.assertNotIn(microvm.id, self.store)

    def test_list(self):
        first = self.store.create(root_spec())
        second = self.store.create(root_spec(vcpu=4))
        self.store.delete(first.id)
        self.assertEqual([second], self.store.list())

    def test_logs_are_tagged(self):
        with self.assertLogs("vmspec.store", level="INFO") as logs:
            self.store.create(root_spec(), vmid="vm-1")
        self.assertIn("[vm-1] Registered at version 1", logs.output[0])
