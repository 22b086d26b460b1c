import json
import stat
from pathlib import Path

from .disk.utils import partition_path
from .models.config import InstallConfig
from .models.device import FilesystemIdentity
from .output import debug, info, logger, plain, warn

_RULE = '═' * 64


class ConfigurationOutput:
	def __init__(self, config: InstallConfig):
		"""
		Renders the configuration for the console and the log directory.
		Nothing here touches the target system.
		"""
		self._config = config
		self._default_save_path = logger.directory
		self._user_config_file = Path('user_configuration.json')

	def user_config_to_json(self) -> str:
		return json.dumps(self._config.safe_json(), indent=4, sort_keys=True)

	def write_debug(self) -> None:
		debug(' -- Chosen configuration --')
		debug(self.user_config_to_json())

	def save(self, dest_path: Path | None = None) -> None:
		save_path = dest_path or self._default_save_path

		if not (save_path.exists() and save_path.is_dir()):
			warn(f'Destination directory {save_path.resolve()} does not exist or is not a directory, configuration can not be saved')
			return

		target = save_path / self._user_config_file
		target.write_text(self.user_config_to_json())
		target.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)

	def summary(self, identity: FilesystemIdentity) -> str:
		config = self._config

		lines = [
			_RULE,
			'Installation Summary',
			_RULE,
			f'Disk:           {config.device}',
			f'EFI partition:  {partition_path(config.device, 1)} (UUID: {identity.efi_uuid})',
			f'Root partition: {partition_path(config.device, 2)} (UUID: {identity.root_uuid})',
			f'Hostname:       {config.hostname}',
			f'Timezone:       {config.timezone}',
			f'Locale:         {config.locale}',
			f'Keymap:         {config.keymap}',
			'',
			'Credentials:',
			f'  Root password:     {config.root_password}',
			f'  User:              {config.username}',
			f'  User password:     {config.user_password}',
			_RULE,
		]

		return '\n'.join(lines)

	def show_summary(self, identity: FilesystemIdentity) -> None:
		# Credentials go to the console only, never into the install log
		plain()
		for line in self.summary(identity).splitlines():
			print(line)
		plain()

		info('Installation completed successfully!')
