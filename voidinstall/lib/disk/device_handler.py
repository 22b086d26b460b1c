from __future__ import annotations

import logging
import time
from pathlib import Path

from ..exceptions import DiskError, SysCallError, UnknownFilesystemFormat
from ..general import SysCommand
from ..models.device import FilesystemType, PartitionLayout, PartitionModification
from ..output import debug, error, info, log


class DeviceHandler:
	def _parted(self, device: Path, *args: str, failure: str) -> None:
		cmd = ['parted', '-s', str(device), *args]

		try:
			SysCommand(cmd)
		except SysCallError as err:
			raise DiskError(f'{failure}: {err.message}') from err

	def wipe_dev(self, device: Path) -> None:
		"""
		Erase every filesystem, RAID and partition-table signature so that
		auto-discovery tools don't recognize anything on the device.
		"""
		info(f'Wiping partitions and metadata: {device}')

		try:
			SysCommand(['wipefs', '-af', str(device)])
		except SysCallError as err:
			raise DiskError(f'Failed to wipe partition table: {err.message}') from err

	def partition(self, layout: PartitionLayout) -> None:
		"""
		Create a fresh GPT label on the block device and create both partitions.
		WARNING: the entire device will be wiped and all data lost
		"""
		self.wipe_dev(layout.device)

		info(f'Creating partitions: {layout.device}')

		self._parted(layout.device, 'mklabel', 'gpt', failure='Failed to create GPT label')

		for part_mod in layout.partitions:
			self._setup_partition(layout.device, part_mod)

	def _setup_partition(self, device: Path, part_mod: PartitionModification) -> None:
		debug(f'Adding partition {part_mod.partn}: {part_mod.fs_type.value} {part_mod.start} -> {part_mod.end}')

		role = 'EFI' if part_mod.is_efi else 'root'

		self._parted(
			device,
			'mkpart',
			'primary',
			part_mod.fs_type.parted_value,
			part_mod.start,
			part_mod.end,
			failure=f'Failed to create {role} partition',
		)

		if part_mod.is_efi:
			self._parted(device, 'set', str(part_mod.partn), 'esp', 'on', failure='Failed to set ESP flag')

	def partprobe(self, path: Path | None = None) -> None:
		if path is not None:
			command = f'partprobe {path}'
		else:
			command = 'partprobe'

		try:
			debug(f'Calling partprobe: {command}')
			SysCommand(command)
		except SysCallError as err:
			if 'have been written, but we have been unable to inform the kernel of the change' in str(err):
				log(f'Partprobe was not able to inform the kernel of the new disk state (ignoring error): {err}', level=logging.INFO)
			else:
				error(f'"{command}" failed to run (continuing anyway): {err}')

	def reread_partition_table(self, device: Path, settle_delay: float) -> None:
		# Kernel partition events are processed asynchronously, give them time on both sides
		time.sleep(settle_delay)
		self.partprobe(device)
		time.sleep(settle_delay)

	def format(self, fs_type: FilesystemType, path: Path) -> None:
		options = []

		match fs_type:
			case FilesystemType.Ext4:
				# Force create, the old signature may still be detected
				command = 'mkfs.ext4'
				options.append('-F')
			case FilesystemType.Fat32:
				command = 'mkfs.vfat'
				options.append('-F32')
			case _:
				raise UnknownFilesystemFormat(f'Filetype "{fs_type.value}" is not supported')

		cmd = [command, *options, str(path)]

		debug('Formatting filesystem:', ' '.join(cmd))

		try:
			SysCommand(cmd)
		except SysCallError as err:
			msg = f'Could not format {path} with {fs_type.value}: {err.message}'
			error(msg)
			raise DiskError(msg) from err

	def mount(
		self,
		dev_path: Path,
		target_mountpoint: Path,
		create_target_mountpoint: bool = False,
	) -> None:
		if create_target_mountpoint and not target_mountpoint.exists():
			try:
				target_mountpoint.mkdir(parents=True, exist_ok=True)
			except OSError as err:
				raise DiskError(f'Failed to create {target_mountpoint} directory: {err}') from err

		command = f'mount {dev_path} {target_mountpoint}'

		debug(f'Mounting {dev_path}: {command}')

		try:
			SysCommand(['mount', str(dev_path), str(target_mountpoint)])
		except SysCallError as err:
			raise DiskError(f'Could not mount {dev_path}: {command}\n{err.message}') from err


device_handler = DeviceHandler()
