"""Void Linux installer: partition, bootstrap and configure a single disk."""

import sys
import traceback

from pydantic import ValidationError

from .lib.args import load_config, parse_arguments
from .lib.configuration import ConfigurationOutput
from .lib.exceptions import InstallError
from .lib.general import SysCommand
from .lib.hardware import SysInfo
from .lib.interactions import ask_reboot
from .lib.models.config import InstallConfig
from .lib.output import debug, error, info, logger
from .lib.pipeline import InstallationPipeline


def _log_sys_info() -> None:
	# Log various information about hardware before starting the installation. This might assist in troubleshooting
	debug(f'UEFI mode: {SysInfo.has_uefi()}; running as root: {SysInfo.is_root()}')

	try:
		debug(f'Memory statistics: {SysInfo.mem_total()} kB total installed')
	except OSError as err:
		debug(f'Could not read memory statistics: {err}')


def _reboot() -> None:
	if ask_reboot():
		SysCommand(['reboot'])
	else:
		info('Remember to reboot before using the system!')


def main(argv: list[str] | None = None) -> int:
	args = parse_arguments(argv)
	logger.verbose = args.debug

	try:
		config: InstallConfig = load_config(args)
	except (ValidationError, ValueError, OSError) as err:
		error(f'Invalid configuration: {err}')
		return 1

	_log_sys_info()

	output = ConfigurationOutput(config)
	output.write_debug()
	output.save()

	pipeline = InstallationPipeline(config)
	result = pipeline.run()

	if not result.ok:
		error(f'See {logger.path} for details')
		return 1

	_reboot()
	return 0


def run_as_a_module() -> None:
	rc = 0

	try:
		rc = main()
	except KeyboardInterrupt:
		error('Installation interrupted')
		rc = 130
	except InstallError as err:
		error(f'Installation failed: {err}')
		rc = 1
	except Exception:
		err = ''.join(traceback.format_exception(*sys.exc_info()))
		error(err)
		error(f'voidinstall experienced the above error, the log file is at {logger.path}')
		rc = 1

	sys.exit(rc)


__all__ = [
	'InstallConfig',
	'InstallationPipeline',
	'main',
	'run_as_a_module',
]
