from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from .models.phase import InstallPhase


class InstallError(Exception):
	"""
	Base class for everything that aborts an installation.
	The pipeline fills in ``phase`` when the error crosses a phase boundary.
	"""

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message
		self.phase: InstallPhase | None = None


class RequirementError(InstallError):
	pass


class HardwareIncompatibilityError(InstallError):
	pass


class DiskError(InstallError):
	pass


class UnknownFilesystemFormat(InstallError):
	pass


class PackageError(InstallError):
	pass


class ChrootError(InstallError):
	def __init__(self, message: str, batch: str) -> None:
		super().__init__(message)
		self.batch = batch


class UserAbort(InstallError):
	pass


class SysCallError(InstallError):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.exit_code = exit_code
		self.worker_log = worker_log
