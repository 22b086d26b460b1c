from pathlib import Path

from ..output import plain, warn


def ask_yes_no(prompt: str) -> bool:
	"""
	A (y/N) question: only an explicit y or Y counts as a yes.
	"""
	answer = input(f'{prompt} (y/N): ').strip()
	return answer in ('y', 'Y')


def ask_continue_without_network() -> bool:
	warn('Network connectivity check failed. Installation may fail.')
	return ask_yes_no('Continue anyway?')


def confirm_disk_wipe(device: Path, summary: str) -> bool:
	"""
	Shows the current state of the disk and demands the literal string YES.
	Anything else, including "yes" or "y", declines.
	"""
	warn('╔════════════════════════════════════════════════════════════╗')
	warn(f'║  WARNING: This will DESTROY ALL DATA on {device}')
	warn('╚════════════════════════════════════════════════════════════╝')
	plain()
	plain(summary)
	plain()

	confirm = input("Type 'YES' in capital letters to continue: ")
	return confirm == 'YES'


def ask_reboot() -> bool:
	plain()
	plain('You can now reboot into your new Void Linux system.')
	plain()
	return ask_yes_no('Reboot now?')
