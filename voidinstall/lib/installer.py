import shlex
import shutil
import textwrap
from pathlib import Path

from .chroot import Chroot, ChrootBatch, chpasswd
from .disk.device_handler import device_handler
from .disk.utils import umount
from .exceptions import RequirementError, SysCallError
from .general import SysCommand
from .models.config import InstallConfig
from .models.device import MountSession, PartitionLayout
from .output import debug, info, plain, warn
from .xbps import Xbps

SUDOERS_WHEEL_RULE = '%wheel ALL=(ALL:ALL) ALL'

_ZRAM_RC_LOCAL = textwrap.dedent(
	"""\
	#!/bin/sh
	# Load zram module
	modprobe zram

	# Configure zram0
	echo zstd > /sys/block/zram0/comp_algorithm
	echo $(awk '/MemTotal/ {printf "%.0f", $2 * 0.5 * 1024}' /proc/meminfo) > /sys/block/zram0/disksize

	# Enable as swap
	mkswap /dev/zram0
	swapon /dev/zram0 -p 100
	"""
)


class Installer:
	def __init__(self, config: InstallConfig, layout: PartitionLayout):
		"""
		`Installer()` wraps every step that writes into the target root.
		The mount session it creates is only ever torn down by cleanup().
		"""
		self._config = config
		self._layout = layout
		self.target: Path = config.mountpoint

		self.session: MountSession | None = None
		self.xbps = Xbps(self.target, config.arch, config.repository)
		self.chroot = Chroot(self.target)

	def mount_ordered_layout(self) -> MountSession:
		info('Mounting partitions...')

		session = MountSession.for_target(self.target)

		# Root first, the EFI filesystem backs <root>/boot directly
		device_handler.mount(self._layout.root.dev_path, session.root)
		session.mounted.append(session.root)
		self.session = session

		device_handler.mount(self._layout.efi.dev_path, session.boot, create_target_mountpoint=True)
		session.mounted.append(session.boot)

		info('Partitions mounted successfully')
		return session

	def minimal_installation(self) -> None:
		info('Bootstrapping base-system...')

		self.xbps.copy_keys()
		self.xbps.strap('base-system', bail_message='Failed to install base-system')

		info('base-system installed successfully')
		info('Updating xbps and system packages...')

		self.xbps.update_xbps()
		self.xbps.update_system()

		info('System updated successfully')

	def add_additional_packages(self, packages: list[str]) -> None:
		info('Installing additional packages...')
		self.xbps.strap(packages, bail_message='Failed to install additional packages')
		info('Additional packages installed successfully')

	def _write(self, relative: str, content: str) -> Path:
		path = self.target / relative
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(content)
		return path

	def set_hostname(self, hostname: str) -> None:
		self._write('etc/hostname', hostname + '\n')

	def set_hosts(self, hostname: str) -> None:
		self._write(
			'etc/hosts',
			'127.0.0.1   localhost\n'
			'::1         localhost\n'
			f'127.0.1.1   {hostname}.localdomain {hostname}\n',
		)

	def set_locale(self, locale: str) -> None:
		self._write('etc/default/libc-locales', f'{locale} UTF-8\n')
		self._write('etc/locale.conf', f'LANG={locale}\n')

	def set_timezone(self, zone: str) -> None:
		zoneinfo = Path('/usr/share/zoneinfo') / zone

		if not (self.target / zoneinfo.relative_to('/')).exists():
			warn(f'Time zone {zone} does not exist in the target yet, linking it anyway')

		localtime = self.target / 'etc/localtime'
		localtime.parent.mkdir(parents=True, exist_ok=True)
		localtime.unlink(missing_ok=True)
		localtime.symlink_to(zoneinfo)

	def set_keyboard_language(self, keymap: str) -> None:
		info(f'Setting keyboard language to {keymap}')

		rc_conf = self.target / 'etc/rc.conf'
		lines = rc_conf.read_text().splitlines() if rc_conf.exists() else []
		lines = [line for line in lines if not line.startswith('KEYMAP=')]
		lines.append(f'KEYMAP={keymap}')

		self._write('etc/rc.conf', '\n'.join(lines) + '\n')

	def configure_dracut(self) -> None:
		"""
		hostonly images only carry the drivers of the hardware they were
		built on, smaller but not portable to another machine.
		"""
		info('Configuring dracut...')
		self._write('etc/dracut.conf.d/10-hostonly.conf', 'hostonly=yes\nhostonly_cmdline=yes\n')

	def genfstab(self) -> None:
		fstab_path = self.target / 'etc' / 'fstab'
		info(f'Generating {fstab_path} using xgenfstab...')

		if shutil.which('xgenfstab') is None:
			info('Installing xtools for xgenfstab...')
			Xbps.install_on_host(['xtools'], bail_message='Failed to install xtools')

		try:
			gen_fstab = SysCommand(['xgenfstab', '-U', str(self.target)], separate_stderr=True).output()
		except SysCallError as err:
			raise RequirementError(f'Failed to generate fstab: {err.message}') from err

		fstab_path.parent.mkdir(parents=True, exist_ok=True)
		fstab_path.write_bytes(gen_fstab)

		if not fstab_path.is_file():
			raise RequirementError('Could not create fstab file')

		info('fstab generated successfully')
		plain(gen_fstab.decode(errors='backslashreplace'))

	def enable_services(self, services: list[str]) -> None:
		info('Enabling essential services...')

		runsvdir = self.target / 'etc/runit/runsvdir/default'

		for service in services:
			if not (self.target / 'etc/sv' / service).is_dir():
				warn(f'Service directory not found: {service}')
				continue

			link = runsvdir / service

			try:
				runsvdir.mkdir(parents=True, exist_ok=True)
				if not link.is_symlink():
					link.symlink_to(Path('/etc/sv') / service)
			except OSError as err:
				warn(f'Failed to enable service: {service} ({err})')
				continue

			debug(f'Enabled service {service}')

	def setup_swap(self) -> None:
		info('Setting up zram (50% of RAM)...')

		rc_local = self._write('etc/rc.local', _ZRAM_RC_LOCAL)
		rc_local.chmod(0o755)

	def configure_system(self) -> None:
		info('Configuring system...')

		self.set_hostname(self._config.hostname)
		self.set_hosts(self._config.hostname)
		self.set_locale(self._config.locale)
		self.set_timezone(self._config.timezone)
		self.set_keyboard_language(self._config.keymap)

		info('System configuration completed')

		self.genfstab()
		self.configure_dracut()
		self.enable_services(list(self._config.services))
		self.setup_swap()

	def reconfigure_packages(self) -> None:
		info('Reconfiguring packages using xchroot...')

		# Locales must exist before packages with localized behaviour reconfigure
		self.chroot.run(
			ChrootBatch(
				'locales',
				[
					'xbps-reconfigure -f glibc-locales',
					'xbps-reconfigure -fa',
				],
			)
		)

		info('Package reconfiguration completed')

	def set_root_password(self) -> None:
		info('Setting root password...')

		password = self._config.root_password
		self.chroot.run(ChrootBatch('root-password', [chpasswd('root', password)], secrets=[password]))

	def create_user(self) -> None:
		username = self._config.username
		password = self._config.user_password
		user = shlex.quote(username)

		info(f"Creating user '{username}'...")

		self.chroot.run(
			ChrootBatch(
				'user',
				[
					f'id -u {user} >/dev/null 2>&1 || '
					f'useradd -m -G {",".join(self._config.user_groups)} -s {shlex.quote(self._config.shell)} {user}',
					chpasswd(username, password),
				],
				secrets=[password],
			)
		)

		self.enable_sudo()

	def enable_sudo(self, rule: str = SUDOERS_WHEEL_RULE) -> bool:
		"""
		Appends ``rule`` to the target's sudoers unless a line already starts with it.
		Returns True when the file was changed.
		"""
		sudoers = self.target / 'etc/sudoers'
		content = sudoers.read_text() if sudoers.exists() else ''

		if any(line.startswith(rule) for line in content.splitlines()):
			debug(f'sudoers already contains "{rule}"')
			return False

		info(f'Enabling sudo permissions: {rule}')

		if content and not content.endswith('\n'):
			content += '\n'

		sudoers.parent.mkdir(parents=True, exist_ok=True)
		sudoers.write_text(content + rule + '\n')
		return True

	def add_bootloader(self) -> None:
		info('Installing GRUB bootloader...')

		self.chroot.run(
			ChrootBatch(
				'bootloader',
				[
					f'grub-install --target={self._config.arch}-efi --efi-directory=/boot '
					f'--bootloader-id={shlex.quote(self._config.bootloader_id)} --recheck',
					'grub-mkconfig -o /boot/grub/grub.cfg',
				],
			)
		)

		info('GRUB installed successfully')

	def cleanup(self) -> None:
		info('Cleaning up mounts...')

		# xchroot tears down its own proc, sys and dev binds
		session = self.session or MountSession.for_target(self.target)

		umount(session.boot, recursive=True)
		umount(session.root, recursive=True)

		session.mounted.clear()
		self.session = None

		info('Cleanup completed')
