from .general_conf import ask_continue_without_network, ask_reboot, ask_yes_no, confirm_disk_wipe

__all__ = [
	'ask_continue_without_network',
	'ask_reboot',
	'ask_yes_no',
	'confirm_disk_wipe',
]
