from .exceptions import RequirementError, SysCallError
from .general import SysCommand
from .output import debug, info


def ping(hostname: str, count: int = 1, timeout: int = 2) -> bool:
	"""
	Uses the system ping binary, ICMP from python needs raw sockets
	which the live environment may not grant us.
	"""
	try:
		SysCommand(['ping', '-c', str(count), '-W', str(timeout), hostname])
	except (SysCallError, RequirementError) as err:
		debug(f'Could not ping {hostname}: {err.message}')
		return False

	return True


def check_connectivity(hostname: str) -> bool:
	info('Checking network connectivity...')
	return ping(hostname)
