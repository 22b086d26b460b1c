from .config import InstallConfig
from .device import (
	FilesystemIdentity,
	FilesystemType,
	MountSession,
	PartitionLayout,
	PartitionModification,
	PartitionRole,
)
from .phase import InstallPhase, PhaseResult, PhaseState

__all__ = [
	'FilesystemIdentity',
	'FilesystemType',
	'InstallConfig',
	'InstallPhase',
	'MountSession',
	'PartitionLayout',
	'PartitionModification',
	'PartitionRole',
	'PhaseResult',
	'PhaseState',
]
