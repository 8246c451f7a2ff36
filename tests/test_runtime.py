#!/usr/bin/env python3
"""
Tests for the subprocess-backed container runtime.
"""

import json
import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock

from dbctl.core.exceptions import ContainerNotFound, RuntimeQueryError
from dbctl.core.runtime import ComposeRuntime, WORKING_DIR_LABEL


def completed(stdout="", stderr="", returncode=0):
    process = MagicMock()
    process.stdout = stdout
    process.stderr = stderr
    process.returncode = returncode
    return process


@pytest.fixture
def mock_run():
    with patch("dbctl.core.runtime.subprocess.run") as run:
        run.return_value = completed()
        yield run


class TestQueries:
    """Test the conflict resolver queries."""

    def test_list_containers_publishing(self, mock_run):
        mock_run.return_value = completed("other-pg\nsecond\n\n")
        runtime = ComposeRuntime()

        assert runtime.list_containers_publishing(15432) == ['other-pg', 'second']
        cmd = mock_run.call_args[0][0]
        assert cmd == ['docker', 'ps', '--filter', 'publish=15432', '--format', '{{.Names}}']

    def test_list_nothing(self, mock_run):
        assert ComposeRuntime().list_containers_publishing(15432) == []

    def test_project_directory_from_label(self, mock_run):
        labels = {WORKING_DIR_LABEL: '/srv/other', 'com.docker.compose.project': 'other'}
        mock_run.return_value = completed(json.dumps(labels) + "\n")

        assert ComposeRuntime().get_project_directory('other-pg') == Path('/srv/other')

    @pytest.mark.parametrize("output", ['null\n', '{}\n', '{"%s": ""}\n' % WORKING_DIR_LABEL])
    def test_project_directory_absent(self, mock_run, output):
        """Containers without compose labels have no project directory."""
        mock_run.return_value = completed(output)

        assert ComposeRuntime().get_project_directory('other-pg') is None

    def test_project_directory_container_gone(self, mock_run):
        mock_run.return_value = completed(stderr="Error: No such object: other-pg", returncode=1)

        assert ComposeRuntime().get_project_directory('other-pg') is None

    def test_project_directory_malformed(self, mock_run):
        mock_run.return_value = completed("not json")

        with pytest.raises(RuntimeQueryError):
            ComposeRuntime().get_project_directory('other-pg')


class TestCommands:
    """Test command execution and error mapping."""

    def test_daemon_unreachable(self, mock_run):
        mock_run.return_value = completed(
            stderr="Cannot connect to the Docker daemon at unix:///var/run/docker.sock",
            returncode=1
        )

        with pytest.raises(RuntimeQueryError) as excinfo:
            ComposeRuntime().list_containers_publishing(15432)

        assert not isinstance(excinfo.value, ContainerNotFound)
        assert excinfo.value.returncode == 1
        assert "Cannot connect" in str(excinfo.value)

    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'podman'")

        with pytest.raises(RuntimeQueryError):
            ComposeRuntime('podman').list_containers_publishing(15432)

    @pytest.mark.parametrize("stderr", [
        "Error response from daemon: No such container: other-pg",
        "Error: no container with name or ID \"other-pg\" found: no such container",
    ])
    def test_stop_missing_container(self, mock_run, stderr):
        mock_run.return_value = completed(stderr=stderr, returncode=1)

        with pytest.raises(ContainerNotFound):
            ComposeRuntime().stop_container('other-pg')

    def test_stop_container(self, mock_run):
        ComposeRuntime('podman').stop_container('other-pg')

        assert mock_run.call_args[0][0] == ['podman', 'stop', 'other-pg']

    def test_bring_project_down(self, mock_run):
        ComposeRuntime().bring_project_down(Path('/srv/other/docker-compose.yml'))

        assert mock_run.call_args[0][0] == [
            'docker', 'compose', '-f', '/srv/other/docker-compose.yml', 'down'
        ]

    def test_compose_env_is_passed(self, mock_run):
        runtime = ComposeRuntime(env={'DB_PORT': '25432'})

        runtime.compose_up(Path('/srv/db/compose.yaml'))

        args, kwargs = mock_run.call_args
        assert args[0] == ['docker', 'compose', '-f', '/srv/db/compose.yaml', 'up', '-d']
        assert kwargs['env']['DB_PORT'] == '25432'

    def test_compose_down_with_volumes(self, mock_run):
        ComposeRuntime().compose_down(Path('/srv/db/compose.yaml'), volumes=True)

        assert mock_run.call_args[0][0][-3:] == ['down', '-v', '--remove-orphans']


class TestComposePs:
    """Test parsing of compose ps output."""

    def test_json_array(self, mock_run):
        mock_run.return_value = completed(json.dumps([
            {'Service': 'postgres', 'State': 'running'},
            {'Service': 'pgadmin', 'State': 'running'},
        ]))

        containers = ComposeRuntime().compose_ps(Path('compose.yaml'))

        assert [c['Service'] for c in containers] == ['postgres', 'pgadmin']

    def test_json_lines(self, mock_run):
        mock_run.return_value = completed(
            '{"Service": "postgres", "State": "running"}\n'
            '{"Service": "pgadmin", "State": "exited"}\n'
        )

        containers = ComposeRuntime().compose_ps(Path('compose.yaml'))

        assert [c['State'] for c in containers] == ['running', 'exited']

    def test_empty(self, mock_run):
        assert ComposeRuntime().compose_ps(Path('compose.yaml')) == []

    def test_malformed(self, mock_run):
        mock_run.return_value = completed('{"Service": ')

        with pytest.raises(RuntimeQueryError):
            ComposeRuntime().compose_ps(Path('compose.yaml'))
