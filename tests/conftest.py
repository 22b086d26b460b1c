import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from voidinstall.lib.models.config import InstallConfig
from voidinstall.lib.output import logger

Output = bytes | Callable[[list[str]], bytes]


@dataclass
class Call:
	cmd: list[str]
	input_data: bytes | None
	environment_vars: dict[str, str]
	separate_stderr: bool = False


@dataclass
class CommandRecorder:
	"""
	Stands in for the process spawning seam: records every command and
	answers with scripted exit codes and output, matched by argv prefix.
	Unscripted commands succeed with no output.
	"""
	calls: list[Call] = field(default_factory=list)
	_responses: list[tuple[tuple[str, ...], int, Output]] = field(default_factory=list)

	def respond(self, *prefix: str, exit_code: int = 0, output: Output = b'') -> None:
		# later registrations win
		self._responses.insert(0, (tuple(prefix), exit_code, output))

	def __call__(
		self,
		cmd: list[str],
		input_data: bytes | None = None,
		environment_vars: dict[str, str] | None = None,
		peek_output: bool = False,
		separate_stderr: bool = False,
	) -> tuple[int, bytes]:
		cmd = list(cmd)
		self.calls.append(Call(cmd, input_data, dict(environment_vars or {}), separate_stderr))

		for prefix, exit_code, output in self._responses:
			if tuple(cmd[:len(prefix)]) == prefix:
				return exit_code, output(cmd) if callable(output) else output

		return 0, b''

	@property
	def commands(self) -> list[list[str]]:
		return [call.cmd for call in self.calls]

	def matching(self, *prefix: str) -> list[Call]:
		return [call for call in self.calls if tuple(call.cmd[:len(prefix)]) == prefix]

	def ran(self, *prefix: str) -> bool:
		return len(self.matching(*prefix)) > 0

	def index(self, *prefix: str) -> int:
		for i, call in enumerate(self.calls):
			if tuple(call.cmd[:len(prefix)]) == prefix:
				return i
		raise AssertionError(f'{prefix} was never executed, ran: {self.commands}')


@dataclass
class ScriptedInput:
	answers: Iterator[str]
	prompts: list[str] = field(default_factory=list)

	def __call__(self, prompt: str = '') -> str:
		self.prompts.append(prompt)

		try:
			return next(self.answers)
		except StopIteration:
			raise AssertionError(f'Unexpected prompt: {prompt!r}')


@pytest.fixture(autouse=True)
def log_dir(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
	path = tmp_path / 'log'
	monkeypatch.setattr(logger, '_path', path)
	monkeypatch.setattr(logger, 'verbose', False)
	return path


@pytest.fixture
def commands(monkeypatch: MonkeyPatch) -> CommandRecorder:
	recorder = CommandRecorder()
	monkeypatch.setattr('voidinstall.lib.general._execute', recorder)
	return recorder


@pytest.fixture
def answers(monkeypatch: MonkeyPatch) -> Callable[..., ScriptedInput]:
	def _script(*values: str) -> ScriptedInput:
		scripted = ScriptedInput(iter(values))
		monkeypatch.setattr('builtins.input', scripted)
		return scripted

	return _script


@pytest.fixture
def target(tmp_path: Path) -> Path:
	return tmp_path / 'mnt'


@pytest.fixture
def config(target: Path) -> InstallConfig:
	return InstallConfig(mountpoint=target, settle_delay=0)


@pytest.fixture
def privileged(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('voidinstall.lib.hardware.SysInfo.is_root', staticmethod(lambda: True))
	monkeypatch.setattr('voidinstall.lib.hardware.SysInfo.has_uefi', staticmethod(lambda: True))


@pytest.fixture
def host_has_xgenfstab(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('voidinstall.lib.installer.shutil.which', lambda name: f'/usr/bin/{name}')


@pytest.fixture
def stub_binary(tmp_path: Path, monkeypatch: MonkeyPatch) -> Callable[[str, str], Path]:
	"""
	Puts a shell script named ``name`` first on PATH.
	"""
	bin_dir = tmp_path / 'bin'
	bin_dir.mkdir()
	monkeypatch.setenv('PATH', f'{bin_dir}{os.pathsep}{os.environ.get("PATH", "")}')

	def _stub(name: str, body: str) -> Path:
		path = bin_dir / name
		path.write_text(f'#!/bin/sh\n{body}\n')
		path.chmod(0o755)
		return path

	return _stub
