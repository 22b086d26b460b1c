from __future__ import annotations

from ..exceptions import UserAbort
from ..interactions import confirm_disk_wipe
from ..models.config import InstallConfig
from ..models.device import FilesystemIdentity, PartitionLayout
from ..output import debug, info
from .device_handler import device_handler
from .utils import disk_summary, get_uuid, partition_layout


class FilesystemHandler:
	def __init__(self, config: InstallConfig):
		self._config = config
		self._layout: PartitionLayout = partition_layout(config)

	@property
	def layout(self) -> PartitionLayout:
		return self._layout

	def confirm(self) -> None:
		"""
		Nothing touches the disk unless the operator typed YES.
		"""
		summary = disk_summary(self._layout.device)

		if not confirm_disk_wipe(self._layout.device, summary):
			raise UserAbort('Installation cancelled by user')

	def perform_partitioning(self) -> None:
		info(f'Partitioning {self._layout.device}...')

		for part_mod in self._layout.partitions:
			debug(f'Planned partition: {part_mod.table_data()}')

		device_handler.partition(self._layout)
		device_handler.reread_partition_table(self._layout.device, self._config.settle_delay)

		info('Partitioning completed successfully')

	def perform_formatting(self) -> FilesystemIdentity:
		info('Formatting partitions...')

		for part_mod in self._layout.partitions:
			device_handler.format(part_mod.fs_type, part_mod.dev_path)

		efi_uuid = get_uuid(self._layout.efi.dev_path)
		root_uuid = get_uuid(self._layout.root.dev_path)

		debug(f'Read back UUIDs: efi={efi_uuid!r} root={root_uuid!r}')

		# An empty UUID makes the identity raise, the run stops before anything gets mounted
		identity = FilesystemIdentity(efi_uuid=efi_uuid, root_uuid=root_uuid)

		info(f'Formatting completed (EFI: {identity.efi_uuid} | Root: {identity.root_uuid})')
		return identity
