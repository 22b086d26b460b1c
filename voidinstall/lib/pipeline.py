from __future__ import annotations

from collections.abc import Callable

from .configuration import ConfigurationOutput
from .disk.filesystem import FilesystemHandler
from .exceptions import InstallError, SysCallError
from .installer import Installer
from .models.config import InstallConfig
from .models.device import FilesystemIdentity
from .models.phase import InstallPhase, PhaseResult, PhaseState
from .output import debug, error, info, warn
from .preflight import run_preflight


class InstallationPipeline:
	"""
	Runs the phases strictly in order. The first failing phase ends the run:
	nothing is rolled back and cleanup is not attempted, whatever was
	partitioned, formatted or mounted stays that way for inspection.
	"""

	def __init__(self, config: InstallConfig):
		self._config = config
		self.fs_handler = FilesystemHandler(config)
		self.installer = Installer(config, self.fs_handler.layout)
		self.identity: FilesystemIdentity | None = None

		self.states: dict[InstallPhase, PhaseState] = {phase: PhaseState.NotStarted for phase in InstallPhase}
		self.results: list[PhaseResult] = []

	def _phases(self) -> list[tuple[InstallPhase, Callable[[], object]]]:
		installer = self.installer

		return [
			(InstallPhase.Preflight, lambda: run_preflight(self._config)),
			(InstallPhase.Partition, self._partition),
			(InstallPhase.Format, self._format),
			(InstallPhase.Mount, installer.mount_ordered_layout),
			(InstallPhase.Bootstrap, installer.minimal_installation),
			(InstallPhase.Packages, lambda: installer.add_additional_packages(list(self._config.packages))),
			(InstallPhase.Configure, installer.configure_system),
			(InstallPhase.Chroot, self._chroot),
			(InstallPhase.Cleanup, installer.cleanup),
			(InstallPhase.Summary, self._summary),
		]

	def _partition(self) -> None:
		self.fs_handler.confirm()
		self.fs_handler.perform_partitioning()

	def _format(self) -> None:
		self.identity = self.fs_handler.perform_formatting()

	def _chroot(self) -> None:
		# xchroot handles the proc, sys, dev and resolv.conf binds for each batch
		self.installer.reconfigure_packages()
		self.installer.set_root_password()
		self.installer.create_user()
		self.installer.add_bootloader()

	def _summary(self) -> None:
		assert self.identity is not None
		ConfigurationOutput(self._config).show_summary(self.identity)

	def run_phase(self, phase: InstallPhase, func: Callable[[], object]) -> PhaseResult:
		self.states[phase] = PhaseState.Running
		debug(f'Phase {phase.value}: running')

		try:
			func()
		except Exception as err:
			if isinstance(err, InstallError):
				err.phase = phase

			self.states[phase] = PhaseState.Failed
			result = PhaseResult(phase, PhaseState.Failed, err)
		else:
			self.states[phase] = PhaseState.Succeeded
			result = PhaseResult(phase, PhaseState.Succeeded)

		debug(f'Phase {phase.value}: {result.state.value}')
		self.results.append(result)
		return result

	def run(self) -> PhaseResult:
		info('Void Linux Production Installer Starting...')

		result: PhaseResult | None = None

		for phase, func in self._phases():
			result = self.run_phase(phase, func)

			if not result.ok:
				self._report_failure(result)
				break

		assert result is not None
		return result

	def _report_failure(self, result: PhaseResult) -> None:
		error(f'Installation failed at phase "{result.phase.value}": {result.cause}')

		cause = result.cause
		while cause is not None:
			if isinstance(cause, SysCallError) and cause.worker_log:
				debug(f'Output of the failed command:\n{cause.worker_log.decode(errors="backslashreplace")[-2000:]}')
				break
			cause = cause.__cause__  # type: ignore[assignment]

		if (session := self.installer.session) and session.is_mounted:
			mounted = ', '.join(str(path) for path in session.mounted)
			warn(f'Filesystems are still mounted for inspection: {mounted}')
			warn(f'Unmount them with "umount -R {session.root}" before running the installer again')

	@property
	def failed_phase(self) -> InstallPhase | None:
		for result in self.results:
			if not result.ok:
				return result.phase
		return None
