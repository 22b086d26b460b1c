import shutil
from pathlib import Path

from ..exceptions import PackageError, SysCallError
from ..general import SysCommand
from ..output import debug, info, warn

HOST_KEYS_DIR = Path('/var/db/xbps/keys')


class Xbps:
	def __init__(self, target: Path, arch: str, repository: str):
		self.target = target
		self.arch = arch
		self.repository = repository

	@property
	def _environment(self) -> dict[str, str]:
		return {'XBPS_ARCH': self.arch}

	@staticmethod
	def run(args: list[str], environment_vars: dict[str, str] | None = None, bail_message: str = 'xbps-install failed') -> SysCommand:
		"""
		A centralized function to call `xbps-install` from.
		Every failure is fatal, there is no retry.
		"""
		try:
			return SysCommand(['xbps-install', *args], environment_vars=environment_vars, peek_output=True)
		except SysCallError as err:
			raise PackageError(f'{bail_message}: {err.message}') from err

	def copy_keys(self, source: Path = HOST_KEYS_DIR) -> None:
		"""
		Best effort: some live environments keep the signing keys elsewhere
		and xbps will ask to import them on first use instead.
		"""
		keys_dir = self.target / 'var/db/xbps/keys'

		try:
			keys_dir.mkdir(parents=True, exist_ok=True)

			for key in sorted(source.glob('*')):
				debug(f'Copying repository key {key.name}')
				shutil.copy2(key, keys_dir / key.name)
		except OSError as err:
			warn(f'Could not copy xbps keys from {source} (continuing anyway): {err}')

	def strap(self, packages: str | list[str], bail_message: str = 'Failed to install packages') -> None:
		if isinstance(packages, str):
			packages = [packages]

		info(f'Installing packages: {packages}')

		self.run(
			['-Sy', '-r', str(self.target), '-R', self.repository, *packages],
			environment_vars=self._environment,
			bail_message=bail_message,
		)

	def update_xbps(self) -> None:
		# An outdated xbps can corrupt the package database when updating everything else
		self.run(['-Suy', '-r', str(self.target), 'xbps'], environment_vars=self._environment, bail_message='Failed to update xbps')

	def update_system(self) -> None:
		self.run(['-Suy', '-r', str(self.target)], environment_vars=self._environment, bail_message='Failed to update system')

	@classmethod
	def install_on_host(cls, packages: list[str], bail_message: str) -> None:
		cls.run(['-Sy', *packages], bail_message=bail_message)


__all__ = [
	'Xbps',
]
