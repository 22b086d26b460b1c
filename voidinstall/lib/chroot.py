from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ChrootError, SysCallError
from .general import SysCommand, secret
from .output import debug, info


@dataclass(frozen=True)
class ChrootBatch:
	"""
	An ordered list of shell commands that run inside the target root as a
	single `set -e` shell: the first failing command ends the batch.
	``secrets`` are masked whenever the script is logged.
	"""
	name: str
	commands: list[str]
	secrets: list[str] = field(default_factory=list)

	def script(self) -> str:
		return '\n'.join(['set -e', *self.commands]) + '\n'

	def masked_script(self) -> str:
		script = self.script()

		for value in self.secrets:
			if value:
				script = script.replace(value, secret(value))

		return script


class Chroot:
	"""
	Runs batches through xchroot, which binds /proc, /sys, /dev and
	resolv.conf into the target for as long as the batch runs.
	"""

	def __init__(self, target: Path, shell: str = '/bin/bash', executable: str = 'xchroot'):
		self.target = target
		self.shell = shell
		self.executable = executable

	def run(self, batch: ChrootBatch) -> SysCommand:
		info(f'Running chroot batch "{batch.name}"')
		debug(f'Chroot batch "{batch.name}":\n{batch.masked_script()}')

		try:
			return SysCommand(
				[self.executable, str(self.target), self.shell],
				input_data=batch.script().encode(),
				peek_output=True,
			)
		except SysCallError as err:
			raise ChrootError(f'Chroot batch "{batch.name}" failed with exit code {err.exit_code}', batch.name) from err


def chpasswd(username: str, password: str) -> str:
	return f'echo {shlex.quote(f"{username}:{password}")} | chpasswd'
