import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path


class Logger:
	def __init__(self, path: Path = Path('/var/log/voidinstall')) -> None:
		self._path = path
		self.verbose = False

	@property
	def path(self) -> Path:
		return self._path / 'install.log'

	@property
	def directory(self) -> Path:
		return self._path

	def _check_permissions(self) -> None:
		log_file = self.path

		try:
			self._path.mkdir(exist_ok=True, parents=True)
			log_file.touch(exist_ok=True)

			with log_file.open('a') as f:
				f.write('')
		except PermissionError:
			# Fallback to creating the log file in the current folder
			self._path = Path('./').absolute()

			warn(f'Not enough permission to place log file at {log_file}, creating it in {self.path} instead')

	def log(self, level: int, content: str) -> None:
		self._check_permissions()

		with self.path.open('a') as f:
			ts = _timestamp()
			level_name = logging.getLevelName(level)
			f.write(f'[{ts}] - {level_name} - {content}\n')


logger = Logger()


def _supports_color() -> bool:
	"""
	Return True if the running system's terminal supports color,
	and False otherwise.
	"""
	supported_platform = sys.platform != 'win32' or 'ANSICON' in os.environ

	is_a_tty = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
	return supported_platform and is_a_tty


class Font(Enum):
	bold = '1'
	italic = '3'
	underscore = '4'


_COLORS = {
	'black': '0',
	'red': '1',
	'green': '2',
	'yellow': '3',
	'blue': '4',
	'magenta': '5',
	'cyan': '6',
	'white': '7',
	'gray': '8;5;246',
}

_LEVEL_TAGS = {
	logging.DEBUG: ('DEBUG', 'gray'),
	logging.INFO: ('INFO', 'green'),
	logging.WARNING: ('WARN', 'yellow'),
	logging.ERROR: ('ERROR', 'red'),
}


def _stylize_output(text: str, fg: str, font: list[Font] = []) -> str:
	"""
	Adds ANSI styling to a text given a foreground color and font options.
	"""
	code_list = [f'3{_COLORS[fg]}']

	for o in font:
		code_list.append(o.value)

	ansi = ';'.join(code_list)

	return f'\033[{ansi}m{text}\033[0m'


def _timestamp() -> str:
	now = datetime.now(tz=UTC)
	return now.strftime('%Y-%m-%d %H:%M:%S')


def info(*msgs: str, level: int = logging.INFO, font: list[Font] = []) -> None:
	log(*msgs, level=level, font=font)


def debug(*msgs: str, level: int = logging.DEBUG, font: list[Font] = []) -> None:
	log(*msgs, level=level, font=font)


def warn(*msgs: str, level: int = logging.WARNING, font: list[Font] = []) -> None:
	log(*msgs, level=level, font=font)


def error(*msgs: str, level: int = logging.ERROR, font: list[Font] = []) -> None:
	log(*msgs, level=level, font=font)


def log(*msgs: str, level: int = logging.INFO, font: list[Font] = []) -> None:
	text = ' '.join([str(x) for x in msgs])

	logger.log(level, text)

	if level == logging.DEBUG and not logger.verbose:
		return

	tag, fg = _LEVEL_TAGS.get(level, ('INFO', 'white'))
	prefix = f'[{tag}]'

	if _supports_color():
		prefix = _stylize_output(prefix, fg, font)

	stream = sys.stderr if level >= logging.ERROR else sys.stdout
	stream.write(f'{prefix} {text}\n')
	stream.flush()


def plain(text: str = '') -> None:
	"""
	Prints untagged console output (banners, tool output) and keeps
	a copy in the install log.
	"""
	if text:
		logger.log(logging.INFO, text)

	sys.stdout.write(f'{text}\n')
	sys.stdout.flush()
