from argparse import ArgumentParser
from pathlib import Path

from pydantic.dataclasses import dataclass as p_dataclass

from .models.config import InstallConfig
from .output import debug


@p_dataclass
class Arguments:
	config: Path | None = None
	mountpoint: Path | None = None
	debug: bool = False


def _define_arguments() -> ArgumentParser:
	parser = ArgumentParser(prog='voidinstall', description='Void Linux installer: wipes one disk and installs a bootable system onto it.')
	parser.add_argument(
		'--config',
		type=Path,
		nargs='?',
		default=None,
		help='JSON file overriding the built-in installation parameters',
	)
	parser.add_argument(
		'--mountpoint',
		type=Path,
		nargs='?',
		default=None,
		help='Target root to mount the new system at (default: /mnt)',
	)
	parser.add_argument(
		'--debug',
		action='store_true',
		default=False,
		help='Echo debug output to the console',
	)
	return parser


def parse_arguments(argv: list[str] | None = None) -> Arguments:
	parsed = _define_arguments().parse_args(argv)
	return Arguments(**vars(parsed))


def load_config(args: Arguments) -> InstallConfig:
	"""
	The built-in parameters, optionally overridden by a JSON file and the
	command line. The result is frozen, every phase gets the same instance.
	"""
	overrides = {}

	if args.mountpoint:
		overrides['mountpoint'] = args.mountpoint

	if args.config:
		debug(f'Loading configuration overrides from {args.config}')
		return InstallConfig.from_file(args.config, **overrides)

	return InstallConfig(**overrides)
