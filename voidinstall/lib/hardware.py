import os
from pathlib import Path


class SysInfo:
	@staticmethod
	def has_uefi() -> bool:
		return os.path.isdir('/sys/firmware/efi')

	@staticmethod
	def is_root() -> bool:
		return os.geteuid() == 0

	@staticmethod
	def _mem_info() -> dict[str, int]:
		mem_info: dict[str, int] = {}

		with Path('/proc/meminfo').open() as file:
			for line in file:
				key, value = line.strip().split(':')
				num = value.split()[0]
				mem_info[key] = int(num)

		return mem_info

	@staticmethod
	def mem_total() -> int:
		return SysInfo._mem_info()['MemTotal']
