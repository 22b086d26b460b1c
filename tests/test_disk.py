import sys
from pathlib import Path

import pytest

from voidinstall.lib.disk.device_handler import device_handler
from voidinstall.lib.disk.filesystem import FilesystemHandler
from voidinstall.lib.disk.utils import get_uuid, partition_layout, partition_path
from voidinstall.lib.exceptions import DiskError, UserAbort
from voidinstall.lib.models.config import InstallConfig
from voidinstall.lib.models.device import FilesystemIdentity, FilesystemType, PartitionRole


@pytest.mark.parametrize(
	'device, expected',
	[
		('/dev/nvme0n1', ('/dev/nvme0n1p1', '/dev/nvme0n1p2')),
		('/dev/nvme1n2', ('/dev/nvme1n2p1', '/dev/nvme1n2p2')),
		('/dev/mmcblk0', ('/dev/mmcblk0p1', '/dev/mmcblk0p2')),
		('/dev/sda', ('/dev/sda1', '/dev/sda2')),
		('/dev/vdb', ('/dev/vdb1', '/dev/vdb2')),
		('/dev/hdc', ('/dev/hdc1', '/dev/hdc2')),
	],
)
def test_partition_path(device: str, expected: tuple[str, str]) -> None:
	assert (str(partition_path(device, 1)), str(partition_path(device, 2))) == expected


def test_partition_layout(config: InstallConfig) -> None:
	layout = partition_layout(config)

	assert layout.device == Path('/dev/nvme0n1')
	assert layout.efi.dev_path == Path('/dev/nvme0n1p1')
	assert layout.efi.fs_type == FilesystemType.Fat32
	assert layout.efi.role == PartitionRole.ESP
	assert layout.efi.end == '500MiB'
	assert layout.root.dev_path == Path('/dev/nvme0n1p2')
	assert layout.root.fs_type == FilesystemType.Ext4
	assert layout.root.role == PartitionRole.Root
	assert (layout.root.start, layout.root.end) == ('500MiB', '100%')


@pytest.mark.parametrize('answer', ['yes', 'y', '', 'Yes', 'YES ', ' YES', 'YESS'])
def test_wipe_requires_exact_yes(config, commands, answers, answer: str) -> None:
	commands.respond('lsblk', output=b'NAME FSTYPE\nnvme0n1')
	answers(answer)

	with pytest.raises(UserAbort):
		FilesystemHandler(config).confirm()

	assert commands.commands == [['lsblk', '-f', '/dev/nvme0n1']]


def test_wipe_proceeds_on_yes(config, commands, answers) -> None:
	prompts = answers('YES')
	handler = FilesystemHandler(config)

	handler.confirm()
	handler.perform_partitioning()

	assert 'YES' in prompts.prompts[0]
	assert commands.commands == [
		['lsblk', '-f', '/dev/nvme0n1'],
		['wipefs', '-af', '/dev/nvme0n1'],
		['parted', '-s', '/dev/nvme0n1', 'mklabel', 'gpt'],
		['parted', '-s', '/dev/nvme0n1', 'mkpart', 'primary', 'fat32', '1MiB', '500MiB'],
		['parted', '-s', '/dev/nvme0n1', 'set', '1', 'esp', 'on'],
		['parted', '-s', '/dev/nvme0n1', 'mkpart', 'primary', 'ext4', '500MiB', '100%'],
		['partprobe', '/dev/nvme0n1'],
	]


def test_missing_disk_is_fatal(config, commands, answers) -> None:
	commands.respond('lsblk', exit_code=32, output=b'lsblk: /dev/nvme0n1: not a block device')
	prompts = answers()

	with pytest.raises(DiskError, match='not found'):
		FilesystemHandler(config).confirm()

	assert prompts.prompts == []


def test_partprobe_failure_is_tolerated(config, commands) -> None:
	commands.respond('partprobe', exit_code=1, output=b'Error: Partition(s) 1 on /dev/nvme0n1 have been written, but we have been unable to inform the kernel of the change')

	FilesystemHandler(config).perform_partitioning()

	assert commands.ran('partprobe')


def test_settle_delay_around_partprobe(config, commands, monkeypatch) -> None:
	events: list[str] = []
	monkeypatch.setattr(sys.modules['voidinstall.lib.disk.device_handler'].time, 'sleep', lambda s: events.append(f'sleep {s}'))
	commands.respond('partprobe', output=lambda cmd: events.append('partprobe') or b'')

	device_handler.reread_partition_table(Path('/dev/sda'), 2)

	assert events == ['sleep 2', 'partprobe', 'sleep 2']


def test_parted_failure_is_fatal(config, commands) -> None:
	commands.respond('parted', '-s', '/dev/nvme0n1', 'set', exit_code=1)

	with pytest.raises(DiskError, match='Failed to set ESP flag'):
		FilesystemHandler(config).perform_partitioning()

	assert not commands.ran('parted', '-s', '/dev/nvme0n1', 'mkpart', 'primary', 'ext4')


def test_format_reads_back_uuids(config, commands) -> None:
	commands.respond('blkid', '-s', 'UUID', '-o', 'value', '/dev/nvme0n1p1', output=b'ABCD-1234\n')
	commands.respond('blkid', '-s', 'UUID', '-o', 'value', '/dev/nvme0n1p2', output=b'0b3c8e1a-5f7d-4e2b-9a61-1c2d3e4f5a6b\n')

	identity = FilesystemHandler(config).perform_formatting()

	assert identity == FilesystemIdentity('ABCD-1234', '0b3c8e1a-5f7d-4e2b-9a61-1c2d3e4f5a6b')
	assert commands.index('mkfs.vfat', '-F32', '/dev/nvme0n1p1') < commands.index('mkfs.ext4', '-F', '/dev/nvme0n1p2')


@pytest.mark.parametrize('empty', ['/dev/nvme0n1p1', '/dev/nvme0n1p2'])
def test_empty_uuid_is_fatal(config, commands, empty: str) -> None:
	commands.respond('blkid', output=b'1111-2222\n')
	commands.respond('blkid', '-s', 'UUID', '-o', 'value', empty, output=b'\n')

	with pytest.raises(DiskError, match='UUID'):
		FilesystemHandler(config).perform_formatting()


def test_format_failure_is_fatal(config, commands) -> None:
	commands.respond('mkfs.ext4', exit_code=1, output=b'mke2fs: Device size reported to be zero.')

	with pytest.raises(DiskError, match='Could not format /dev/nvme0n1p2 with ext4'):
		FilesystemHandler(config).perform_formatting()

	assert not commands.ran('blkid')


def test_sata_device_layout(tmp_path) -> None:
	config = InstallConfig(device='/dev/sdb', efi_size='1GiB', mountpoint=tmp_path)
	layout = partition_layout(config)

	assert [str(p.dev_path) for p in layout.partitions] == ['/dev/sdb1', '/dev/sdb2']
	assert layout.efi.end == '1GiB'


def test_get_uuid_ignores_stderr(stub_binary) -> None:
	stub_binary('blkid', 'echo "blkid: cache file is stale" >&2\necho ABCD-1234')

	assert get_uuid(Path('/dev/nvme0n1p1')) == 'ABCD-1234'
