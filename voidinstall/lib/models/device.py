from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..exceptions import DiskError


class FilesystemType(Enum):
	Ext4 = 'ext4'
	Fat32 = 'fat32'

	@property
	def parted_value(self) -> str:
		return self.value


class PartitionRole(Enum):
	ESP = 'esp'
	Root = 'root'


@dataclass(frozen=True)
class PartitionModification:
	partn: int
	dev_path: Path
	fs_type: FilesystemType
	role: PartitionRole
	start: str
	end: str
	mountpoint: Path

	@property
	def is_efi(self) -> bool:
		return self.role == PartitionRole.ESP

	def table_data(self) -> dict[str, str]:
		return {
			'Partition': str(self.partn),
			'Device': str(self.dev_path),
			'Filesystem': self.fs_type.value,
			'Role': self.role.value,
			'Range': f'{self.start} - {self.end}',
			'Mountpoint': str(self.mountpoint),
		}


@dataclass(frozen=True)
class PartitionLayout:
	"""
	The fixed two partition GPT layout: an ESP backing /boot
	and an ext4 root spanning the rest of the device.
	"""
	device: Path
	efi: PartitionModification
	root: PartitionModification

	@property
	def partitions(self) -> list[PartitionModification]:
		return [self.efi, self.root]


@dataclass(frozen=True)
class FilesystemIdentity:
	efi_uuid: str
	root_uuid: str

	def __post_init__(self) -> None:
		if not self.efi_uuid.strip():
			raise DiskError('Failed to get EFI UUID')

		if not self.root_uuid.strip():
			raise DiskError('Failed to get ROOT UUID')


@dataclass
class MountSession:
	root: Path
	boot: Path
	mounted: list[Path] = field(default_factory=list)

	@classmethod
	def for_target(cls, target: Path) -> MountSession:
		return cls(root=target, boot=target / 'boot')

	@property
	def is_mounted(self) -> bool:
		return len(self.mounted) > 0
