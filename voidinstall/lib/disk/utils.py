import re
from pathlib import Path

from ..exceptions import DiskError, SysCallError
from ..general import SysCommand
from ..models.config import InstallConfig
from ..models.device import FilesystemType, PartitionLayout, PartitionModification, PartitionRole
from ..output import debug, warn

# Controllers whose kernel names end in a digit separate the partition number with a "p"
_PARTITION_SEPARATED_RE = re.compile(r'(nvme|mmcblk)')


def partition_path(device: Path | str, partn: int) -> Path:
	"""
	/dev/nvme0n1 + 1 -> /dev/nvme0n1p1, /dev/mmcblk0 + 2 -> /dev/mmcblk0p2,
	/dev/sda + 1 -> /dev/sda1
	"""
	device = Path(device)

	if _PARTITION_SEPARATED_RE.search(device.name):
		return device.with_name(f'{device.name}p{partn}')

	return device.with_name(f'{device.name}{partn}')


def partition_layout(config: InstallConfig) -> PartitionLayout:
	efi = PartitionModification(
		partn=1,
		dev_path=partition_path(config.device, 1),
		fs_type=FilesystemType.Fat32,
		role=PartitionRole.ESP,
		start='1MiB',
		end=config.efi_size,
		mountpoint=Path('/boot'),
	)

	root = PartitionModification(
		partn=2,
		dev_path=partition_path(config.device, 2),
		fs_type=FilesystemType.Ext4,
		role=PartitionRole.Root,
		start=config.efi_size,
		end='100%',
		mountpoint=Path('/'),
	)

	return PartitionLayout(device=config.device, efi=efi, root=root)


def disk_summary(dev_path: Path | str) -> str:
	"""
	The human readable `lsblk -f` view shown before the disk gets wiped.
	Raises DiskError when the device does not exist.
	"""
	try:
		return SysCommand(['lsblk', '-f', str(dev_path)]).decode()
	except SysCallError as err:
		raise DiskError(f'Disk {dev_path} not found') from err


def get_uuid(dev_path: Path) -> str:
	try:
		return SysCommand(['blkid', '-s', 'UUID', '-o', 'value', str(dev_path)], separate_stderr=True).decode()
	except SysCallError as err:
		raise DiskError(f'Could not read the UUID of {dev_path}: {err.message}') from err


def umount(mountpoint: Path, recursive: bool = False) -> bool:
	cmd = ['umount']

	if recursive:
		cmd.append('-R')

	cmd.append(str(mountpoint))

	debug(f'Unmounting mountpoint: {mountpoint}')

	try:
		SysCommand(cmd)
	except SysCallError as err:
		warn(f'Could not unmount {mountpoint} (ignoring): {err.message}')
		return False

	return True
