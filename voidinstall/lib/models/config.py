import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

DEFAULT_HOSTNAME = 'rnoba'

DEFAULT_PACKAGES = (
	'grub', 'grub-x86_64-efi', 'efibootmgr', 'dosfstools',
	'NetworkManager', 'network-manager-applet', 'dhcpcd',
	'dbus', 'elogind', 'nftables',
	'pipewire', 'pulseaudio',
	'p7zip', 'unzip',
	'alacritty', 'zsh', 'tmux', 'i3', 'dmenu', 'firefox', 'mpv', 'neovim', 'flameshot',
	'base-devel', 'gcc', 'clang', 'git', 'curl', 'direnv',
	'noto-fonts-ttf', 'noto-fonts-cjk', 'noto-fonts-emoji', 'nerd-fonts',
	'vulkan-loader', 'ripgrep', 'xclip',
	'xorg', 'xorg-server',
	'xtools', 'sudo',
)

_SIZE_RE = re.compile(r'^\d+(\.\d+)?(B|s|kB|KiB|MB|MiB|GB|GiB|TB|TiB|%)$')

_SECRET_FIELDS = {'root_password', 'user_password'}


class InstallConfig(BaseModel):
	"""
	Every parameter of an installation. Constructed once before the first
	phase runs and handed to each component, never mutated afterwards.
	"""

	model_config = ConfigDict(frozen=True, extra='forbid')

	device: Path = Path('/dev/nvme0n1')
	efi_size: str = '500MiB'
	hostname: str = DEFAULT_HOSTNAME
	timezone: str = 'America/Sao_Paulo'
	locale: str = 'en_US.UTF-8'
	keymap: str = 'us'
	arch: str = 'x86_64'
	repository: str = 'https://repo-default.voidlinux.org/current'
	packages: tuple[str, ...] = DEFAULT_PACKAGES
	username: str = DEFAULT_HOSTNAME
	user_password: str = '123'
	root_password: str = 'root'
	user_groups: tuple[str, ...] = ('wheel', 'audio', 'video', 'input', 'storage', 'optical')
	shell: str = '/bin/bash'
	services: tuple[str, ...] = ('NetworkManager', 'dbus', 'elogind')
	mountpoint: Path = Path('/mnt')
	bootloader_id: str = 'void'
	network_host: str = 'voidlinux.org'
	settle_delay: float = 2

	@model_validator(mode='before')
	@classmethod
	def default_username(cls, data: Any) -> Any:
		# The created user is named after the machine unless told otherwise
		if isinstance(data, dict) and not data.get('username'):
			data = {**data, 'username': data.get('hostname', DEFAULT_HOSTNAME)}
		return data

	@field_validator('device', mode='before')
	@classmethod
	def device_not_empty(cls, v: Any) -> Any:
		if v is None or not str(v).strip():
			raise ValueError('target device path must not be empty')
		return v

	@field_validator('packages')
	@classmethod
	def packages_unique(cls, v: tuple[str, ...]) -> tuple[str, ...]:
		duplicates = {p for p in v if v.count(p) > 1}

		if duplicates:
			raise ValueError(f'duplicate packages: {", ".join(sorted(duplicates))}')
		return v

	@field_validator('efi_size')
	@classmethod
	def valid_size(cls, v: str) -> str:
		if not _SIZE_RE.match(v):
			raise ValueError(f'"{v}" is not a parted size (e.g. 500MiB)')
		return v

	@field_validator('hostname', 'username')
	@classmethod
	def not_blank(cls, v: str) -> str:
		if not v.strip():
			raise ValueError('must not be empty')
		return v

	@classmethod
	def from_file(cls, path: Path, **overrides: Any) -> 'InstallConfig':
		"""
		Loads a JSON file of field overrides, anything not mentioned keeps
		its compiled-in default.
		"""
		data = json.loads(path.read_text())

		if not isinstance(data, dict):
			raise ValueError(f'{path}: expected a JSON object')

		return cls.model_validate({**data, **overrides})

	def safe_json(self) -> dict[str, Any]:
		return self.model_dump(mode='json', exclude=_SECRET_FIELDS)

	def unsafe_json(self) -> dict[str, Any]:
		return self.model_dump(mode='json')
