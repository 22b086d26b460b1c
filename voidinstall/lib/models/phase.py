from dataclasses import dataclass
from enum import Enum


class InstallPhase(Enum):
	Preflight = 'preflight'
	Partition = 'partition'
	Format = 'format'
	Mount = 'mount'
	Bootstrap = 'bootstrap'
	Packages = 'packages'
	Configure = 'configure'
	Chroot = 'chroot'
	Cleanup = 'cleanup'
	Summary = 'summary'

	def display_msg(self) -> str:
		match self:
			case InstallPhase.Preflight:
				return 'Pre-flight checks'
			case InstallPhase.Partition:
				return 'Partitioning'
			case InstallPhase.Format:
				return 'Formatting'
			case InstallPhase.Mount:
				return 'Mounting'
			case InstallPhase.Bootstrap:
				return 'Bootstrapping base-system'
			case InstallPhase.Packages:
				return 'Installing additional packages'
			case InstallPhase.Configure:
				return 'Configuring system'
			case InstallPhase.Chroot:
				return 'Chroot configuration'
			case InstallPhase.Cleanup:
				return 'Cleanup'
			case InstallPhase.Summary:
				return 'Summary'


class PhaseState(Enum):
	NotStarted = 'not-started'
	Running = 'running'
	Succeeded = 'succeeded'
	Failed = 'failed'


@dataclass(frozen=True)
class PhaseResult:
	phase: InstallPhase
	state: PhaseState
	cause: Exception | None = None

	@property
	def ok(self) -> bool:
		return self.state == PhaseState.Succeeded

	@property
	def message(self) -> str:
		if self.cause is None:
			return f'{self.phase.display_msg()}: {self.state.value}'

		return f'{self.phase.display_msg()} failed: {self.cause}'
