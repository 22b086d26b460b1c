from __future__ import annotations

import os
import re
import shlex
import stat
import subprocess
import sys
import time
from collections.abc import Iterator
from shutil import which
from typing import override

from .exceptions import RequirementError, SysCallError
from .output import debug, logger

# https://stackoverflow.com/a/43627833/929999
_VT100_ESCAPE_REGEX_BYTES = rb'\x1B\[[?0-9;]*[a-zA-Z]'


def locate_binary(name: str) -> str:
	if path := which(name):
		return path
	raise RequirementError(f"Binary {name} does not exist.")


def clear_vt100_escape_codes(data: bytes) -> bytes:
	return re.sub(_VT100_ESCAPE_REGEX_BYTES, b'', data)


def _log_cmd(cmd: list[str]) -> None:
	history_logfile = logger.directory / 'cmd_history.txt'

	change_perm = False
	if history_logfile.exists() is False:
		change_perm = True

	try:
		with history_logfile.open("a") as cmd_log:
			cmd_log.write(f"{time.time()} {cmd}\n")

		if change_perm:
			history_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)
	except (PermissionError, FileNotFoundError):
		# If history_logfile does not exist, ignore the error
		pass


def _execute(
	cmd: list[str],
	input_data: bytes | None = None,
	environment_vars: dict[str, str] | None = None,
	peek_output: bool = False,
	separate_stderr: bool = False,
) -> tuple[int, bytes]:
	"""
	The one place where voidinstall spawns a process.
	Returns the exit code and the combined stdout/stderr of the command.

	With ``separate_stderr`` a successful command only returns its stdout,
	stderr goes to the debug log. A failing one still gets stderr appended
	so the failure report carries it.
	"""
	if cmd and not cmd[0].startswith(('/', './')):
		cmd = [locate_binary(cmd[0]), *cmd[1:]]

	_log_cmd(cmd)

	proc = subprocess.Popen(
		cmd,
		stdin=subprocess.PIPE if input_data is not None else subprocess.DEVNULL,
		stdout=subprocess.PIPE,
		stderr=subprocess.PIPE if separate_stderr else subprocess.STDOUT,
		env={**os.environ, **(environment_vars or {})},
	)

	if separate_stderr:
		stdout, stderr = proc.communicate(input_data)

		if stderr:
			debug(f'{cmd[0]} wrote to stderr: {stderr.decode(errors="backslashreplace").strip()}')

		if proc.returncode != 0:
			return proc.returncode, stdout + stderr
		return proc.returncode, stdout

	if input_data is not None and proc.stdin:
		proc.stdin.write(input_data)
		proc.stdin.close()

	trace_log = b''
	assert proc.stdout is not None

	for line in proc.stdout:
		trace_log += line

		if peek_output:
			sys.stdout.write(line.decode('utf-8', errors='backslashreplace'))
			sys.stdout.flush()

	proc.stdout.close()
	return proc.wait(), trace_log


class SysCommand:
	def __init__(
		self,
		cmd: str | list[str],
		input_data: bytes | None = None,
		environment_vars: dict[str, str] | None = None,
		peek_output: bool = False,
		remove_vt100_escape_codes_from_lines: bool = True,
		separate_stderr: bool = False,
	):
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)

		# define the standard locale for command outputs. For now the C ascii one. Can be overridden
		self.environment_vars = {'LC_ALL': 'C'}
		if environment_vars:
			self.environment_vars.update(environment_vars)

		self.cmd = [str(arg) for arg in cmd]
		self.input_data = input_data
		self.peek_output = peek_output
		self.separate_stderr = separate_stderr
		self.remove_vt100_escape_codes_from_lines = remove_vt100_escape_codes_from_lines

		self.exit_code: int | None = None
		self._trace_log = b''

		self.execute()

	def execute(self) -> None:
		debug(f'Executing: {shlex.join(self.cmd)}')

		self.exit_code, self._trace_log = _execute(
			self.cmd,
			input_data=self.input_data,
			environment_vars=self.environment_vars,
			peek_output=self.peek_output,
			separate_stderr=self.separate_stderr,
		)

		if self.exit_code != 0:
			raise SysCallError(
				f"{self.cmd} exited with abnormal exit code [{self.exit_code}]: {str(self)[-500:]}",
				self.exit_code,
				worker_log=self._trace_log,
			)

	def __iter__(self) -> Iterator[bytes]:
		for line in filter(None, self._trace_log.splitlines()):
			if self.remove_vt100_escape_codes_from_lines:
				line = clear_vt100_escape_codes(line)

			yield line + b'\n'

	@override
	def __str__(self) -> str:
		try:
			return self._trace_log.decode('utf-8')
		except UnicodeDecodeError:
			return str(self._trace_log)

	@override
	def __repr__(self) -> str:
		return self.decode('UTF-8', errors='backslashreplace') or ''

	def decode(self, encoding: str = 'utf-8', errors: str = 'backslashreplace', strip: bool = True) -> str:
		val = self._trace_log.decode(encoding, errors=errors)

		if strip:
			return val.strip()
		return val

	def output(self, remove_cr: bool = True) -> bytes:
		if remove_cr:
			return self._trace_log.replace(b'\r\n', b'\n')

		return self._trace_log

	@property
	def trace_log(self) -> bytes:
		return self._trace_log


def secret(x: str) -> str:
	""" return * with len equal to to the input string """
	return '*' * len(x)
