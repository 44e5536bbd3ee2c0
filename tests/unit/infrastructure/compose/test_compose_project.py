import json

import pytest

from composecli.domain.models.options import CreateOptions, DeleteOptions, DownOptions, UpOptions
from composecli.infrastructure.compose.project import DockerComposeProject, parse_ps_output
from composecli.infrastructure.compose.runner import CommandResult, ComposeCommandError

BASE = ["docker", "compose", "--project-name", "app", "--file", "/srv/app/compose.yaml"]

PS_ENTRIES = [
    {"ID": "aaa", "Name": "app-web-1", "Command": "\"nginx -g 'daemon off;'\"", "State": "running",
     "Publishers": [{"URL": "0.0.0.0", "TargetPort": 80, "PublishedPort": 8080, "Protocol": "tcp"}]},
    {"ID": "bbb", "Name": "app-db-1", "Command": "postgres", "State": "exited", "Publishers": []},
    {"ID": "ccc", "Name": "app-cache-1", "Command": "redis", "State": "created", "Ports": "6379/tcp"},
]


@pytest.fixture
def project():
    return DockerComposeProject(name="app", files=["/srv/app/compose.yaml"], working_dir="/srv/app")


@pytest.fixture
def mock_attached(mocker):
    return mocker.patch("composecli.infrastructure.compose.project.run_attached", return_value=0)


@pytest.fixture
def mock_captured(mocker):
    return mocker.patch("composecli.infrastructure.compose.project.run_captured")


def _result(stdout="", return_code=0, stderr=""):
    return CommandResult(command=[], return_code=return_code, stdout=stdout, stderr=stderr)


def test_parse_ps_output_json_lines():
    output = "\n".join(json.dumps(entry) for entry in PS_ENTRIES)
    infos = parse_ps_output(output)

    assert infos.ids() == ["aaa", "bbb", "ccc"]
    web = infos.containers[0]
    assert web.command == "nginx -g 'daemon off;'"
    assert web.ports == "0.0.0.0:8080->80/tcp"
    assert infos.containers[2].ports == "6379/tcp"


def test_parse_ps_output_json_array():
    assert parse_ps_output(json.dumps(PS_ENTRIES)).ids() == ["aaa", "bbb", "ccc"]


def test_parse_ps_output_empty():
    assert len(parse_ps_output("  \n")) == 0


def test_list_stopped_containers_filters_active(project, mock_captured):
    mock_captured.return_value = _result(json.dumps(PS_ENTRIES))

    assert project.list_stopped_containers(["web", "db"]) == ["app-db-1", "app-cache-1"]
    mock_captured.assert_called_once_with(BASE + ["ps", "--all", "--format", "json", "web", "db"], cwd="/srv/app")


def test_captured_failure_raises(project, mock_captured):
    mock_captured.return_value = _result(return_code=1, stderr="no such service: nope\n")

    with pytest.raises(ComposeCommandError, match="no such service: nope"):
        project.list(False, ["nope"])


def test_resolve_port(project, mock_captured):
    mock_captured.return_value = _result("0.0.0.0:8080\n")

    assert project.resolve_port(1, "tcp", "web", "80") == "0.0.0.0:8080"
    mock_captured.assert_called_once_with(
        BASE + ["port", "--index", "1", "--protocol", "tcp", "web", "80"], cwd="/srv/app"
    )


def test_resolve_port_unpublished(project, mock_captured):
    mock_captured.return_value = _result("\n")
    with pytest.raises(LookupError):
        project.resolve_port(1, "tcp", "web", "81")


def test_up_always_detaches(project, mock_attached):
    project.up(UpOptions(create=CreateOptions(no_recreate=True, no_build=True)), ["web"])
    mock_attached.assert_called_once_with(
        BASE + ["up", "--detach", "--no-recreate", "--no-build", "web"], cwd="/srv/app"
    )


@pytest.fixture
def mock_process(mocker):
    process_class = mocker.patch("composecli.infrastructure.compose.project.AttachedProcess")
    process_class.return_value.wait.return_value = 0
    process_class.return_value.command = BASE + ["logs", "--follow", "web"]
    return process_class


def test_follow_logs_run_in_own_session(project, mock_process):
    project.stream_logs(True, ["web"])

    mock_process.assert_called_once_with(BASE + ["logs", "--follow", "web"], cwd="/srv/app", new_session=True)
    mock_process.return_value.terminate.assert_called_once_with()


def test_log_stream_failure_raises(project, mock_process):
    mock_process.return_value.wait.return_value = 1
    stream = project.open_log_stream(True, ["web"])

    with pytest.raises(ComposeCommandError, match="exit status 1"):
        stream.wait()


def test_cancelled_log_stream_ends_quietly(project, mock_process):
    mock_process.return_value.wait.return_value = -15
    stream = project.open_log_stream(True, ["web"])

    stream.cancel()
    stream.wait()

    mock_process.return_value.terminate.assert_called_once_with()


def test_attached_failure_raises(project, mock_attached):
    mock_attached.return_value = 1
    with pytest.raises(ComposeCommandError, match="exit status 1"):
        project.stop(10, [])


def test_run_returns_exit_code(project, mock_attached):
    mock_attached.return_value = 5

    assert project.run("web", ["sh", "-c", "exit 5"]) == 5
    mock_attached.assert_called_once_with(BASE + ["run", "web", "sh", "-c", "exit 5"], cwd="/srv/app")


def test_verb_commands(project, mock_attached):
    project.stop(10, ["web"])
    project.down(DownOptions(remove_volume=True), [])
    project.delete(DeleteOptions(remove_volume=False), ["db"])
    project.kill("SIGTERM", ["web"])
    project.restart(3, [])

    commands = [c.args[0][len(BASE):] for c in mock_attached.call_args_list]
    assert commands == [
        ["stop", "--timeout", "10", "web"],
        ["down", "--volumes"],
        ["rm", "--force", "db"],
        ["kill", "--signal", "SIGTERM", "web"],
        ["restart", "--timeout", "3"],
    ]


def test_scale(project, mock_attached):
    project.scale(5, {"web": 3, "worker": 0})

    command = mock_attached.call_args.args[0][len(BASE):]
    assert command == [
        "up", "--detach", "--no-recreate", "--timeout", "5",
        "--scale", "web=3", "--scale", "worker=0", "web", "worker",
    ]
