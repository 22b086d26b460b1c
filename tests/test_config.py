import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from voidinstall.lib.args import Arguments, load_config, parse_arguments
from voidinstall.lib.models.config import DEFAULT_PACKAGES, InstallConfig


def test_defaults() -> None:
	config = InstallConfig()

	assert config.device == Path('/dev/nvme0n1')
	assert config.efi_size == '500MiB'
	assert config.hostname == 'rnoba'
	assert config.username == 'rnoba'
	assert config.timezone == 'America/Sao_Paulo'
	assert config.locale == 'en_US.UTF-8'
	assert config.keymap == 'us'
	assert config.arch == 'x86_64'
	assert config.repository == 'https://repo-default.voidlinux.org/current'
	assert config.packages == DEFAULT_PACKAGES
	assert config.mountpoint == Path('/mnt')
	assert len(set(DEFAULT_PACKAGES)) == len(DEFAULT_PACKAGES)


def test_username_follows_hostname() -> None:
	assert InstallConfig(hostname='voidbox').username == 'voidbox'
	assert InstallConfig(hostname='voidbox', username='alice').username == 'alice'


@pytest.mark.parametrize('device', ['', '   ', None])
def test_empty_device_rejected(device: str | None) -> None:
	with pytest.raises(ValidationError, match='must not be empty'):
		InstallConfig(device=device)


def test_duplicate_packages_rejected() -> None:
	with pytest.raises(ValidationError, match='duplicate packages: git'):
		InstallConfig(packages=('git', 'curl', 'git'))


@pytest.mark.parametrize('size', ['500', 'MiB', '500 MiB', '-1MiB'])
def test_invalid_efi_size_rejected(size: str) -> None:
	with pytest.raises(ValidationError):
		InstallConfig(efi_size=size)


def test_config_is_frozen() -> None:
	config = InstallConfig()

	with pytest.raises(ValidationError):
		config.hostname = 'other'  # type: ignore[misc]


def test_unknown_field_rejected() -> None:
	with pytest.raises(ValidationError):
		InstallConfig(swap_size='4G')  # type: ignore[call-arg]


def test_from_file(tmp_path: Path) -> None:
	path = tmp_path / 'install.json'
	path.write_text(json.dumps({'device': '/dev/sda', 'hostname': 'voidbox', 'packages': ['git', 'curl']}))

	config = InstallConfig.from_file(path, mountpoint=Path('/target'))

	assert config.device == Path('/dev/sda')
	assert config.hostname == 'voidbox'
	assert config.username == 'voidbox'
	assert config.packages == ('git', 'curl')
	assert config.mountpoint == Path('/target')
	assert config.timezone == 'America/Sao_Paulo'


def test_from_file_requires_object(tmp_path: Path) -> None:
	path = tmp_path / 'install.json'
	path.write_text('["/dev/sda"]')

	with pytest.raises(ValueError, match='expected a JSON object'):
		InstallConfig.from_file(path)


def test_safe_json_hides_passwords() -> None:
	config = InstallConfig(user_password='hunter2')

	assert 'user_password' not in config.safe_json()
	assert 'root_password' not in config.safe_json()
	assert config.unsafe_json()['user_password'] == 'hunter2'
	assert config.safe_json()['device'] == '/dev/nvme0n1'


def test_default_args() -> None:
	assert parse_arguments([]) == Arguments(config=None, mountpoint=None, debug=False)


def test_correct_parsing_args(tmp_path: Path) -> None:
	args = parse_arguments(['--config', str(tmp_path / 'c.json'), '--mountpoint', '/target', '--debug'])

	assert args == Arguments(config=tmp_path / 'c.json', mountpoint=Path('/target'), debug=True)


def test_load_config_without_file() -> None:
	assert load_config(Arguments()) == InstallConfig()
	assert load_config(Arguments(mountpoint=Path('/target'))).mountpoint == Path('/target')


def test_load_config_with_file(tmp_path: Path) -> None:
	path = tmp_path / 'install.json'
	path.write_text(json.dumps({'keymap': 'de', 'mountpoint': '/from-file'}))

	config = load_config(Arguments(config=path, mountpoint=Path('/from-cli')))

	assert config.keymap == 'de'
	assert config.mountpoint == Path('/from-cli')
