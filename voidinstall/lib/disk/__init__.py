from .device_handler import DeviceHandler, device_handler
from .filesystem import FilesystemHandler
from .utils import disk_summary, get_uuid, partition_layout, partition_path, umount

__all__ = [
	'DeviceHandler',
	'FilesystemHandler',
	'device_handler',
	'disk_summary',
	'get_uuid',
	'partition_layout',
	'partition_path',
	'umount',
]
