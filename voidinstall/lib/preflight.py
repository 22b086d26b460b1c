from .exceptions import HardwareIncompatibilityError, RequirementError, UserAbort
from .hardware import SysInfo
from .interactions import ask_continue_without_network
from .models.config import InstallConfig
from .networking import check_connectivity
from .output import debug


def check_root() -> None:
	if not SysInfo.is_root():
		raise RequirementError('This script must be run as root')


def check_uefi() -> None:
	if not SysInfo.has_uefi():
		raise HardwareIncompatibilityError('UEFI mode required. Please boot in UEFI mode.')


def check_network(config: InstallConfig) -> None:
	if check_connectivity(config.network_host):
		debug(f'{config.network_host} is reachable')
		return

	if not ask_continue_without_network():
		raise UserAbort('Installation cancelled')


def run_preflight(config: InstallConfig) -> None:
	"""
	Privilege and firmware checks are hard requirements, an unreachable
	network can be overridden by the operator.
	"""
	check_root()
	check_uefi()
	check_network(config)
