# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from pathlib import Path

import pytest

from valcol.__main__ import main, parse_arguments
from valcol.configuration import configuration_template, default_configuration_file


class TestCommandLine:

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv('wss', raising=False)
        arguments = parse_arguments([])
        assert arguments.url == 'ws://localhost:6006'
        assert arguments.config == default_configuration_file
        assert arguments.create_schema is False
        assert arguments.log_level == 'INFO'

    def test_url_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('wss', 'wss://validators.example.com')
        assert parse_arguments([]).url == 'wss://validators.example.com'
        assert parse_arguments(['--url', 'ws://127.0.0.1:6006']).url == 'ws://127.0.0.1:6006'

    def test_missing_configuration(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(['--config', str(tmp_path / 'missing'), '--log-level', 'CRITICAL'])
        assert exc_info.value.code == 1
        assert f'Expecting:\n{configuration_template}' in capsys.readouterr().err
