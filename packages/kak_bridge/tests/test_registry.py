from __future__ import annotations

import io

import pytest

from kak_bridge.config import Settings
from kak_bridge.context import Kak
from kak_bridge.errors import DefinitionError, UnknownCommandError
from kak_bridge.models import Block, Command
from kak_bridge.registry import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_PROTOCOL_ERROR,
    CommandRegistry,
    main,
)


def _build_registry(calls: list[str]) -> CommandRegistry:
    registry = CommandRegistry()

    @registry.command(params=1, exports=["buffile"], override=True)
    def open_note(kak: Kak) -> None:
        """Open a note."""
        calls.append(f"open:{kak.params[0]}:{kak.var('buffile')}")

    registry.register(
        Command(
            name="notes",
            blocks=(Block(lambda kak: calls.append("notes:0")), Block(lambda kak: calls.append("notes:1"))),
        )
    )
    return registry


def test_decorator_derives_name_and_docstring() -> None:
    registry = _build_registry([])
    command = registry.get("open-note")
    assert command is not None
    assert command.docstring == "Open a note."
    assert command.params == 1
    assert command.override is True
    assert [v.name for v in command.blocks[0].exports] == ["buffile"]
    assert "notes" in registry
    assert [c.name for c in registry] == ["open-note", "notes"]
    assert len(registry) == 2


def test_duplicate_registration_rejected() -> None:
    registry = CommandRegistry()
    registry.register(Command(name="save", blocks=(Block(lambda kak: None),)))
    with pytest.raises(DefinitionError, match="already registered"):
        registry.register(Command(name="save", blocks=(Block(lambda kak: None),)))


def test_definition_pass_emits_all_commands_in_order(settings: Settings, stdout: io.StringIO) -> None:
    calls: list[str] = []
    registry = _build_registry(calls)
    status = registry.run(["plugin"], environ={}, stdout=stdout, settings=settings)
    assert status == EXIT_OK
    assert calls == []
    headers = [line for line in stdout.getvalue().splitlines() if line.startswith("define-command")]
    assert headers == [
        'define-command -override -docstring "Open a note." -params 1 open-note %{',
        "define-command -params 0 notes %{",
    ]


def test_definition_pass_is_deterministic(settings: Settings) -> None:
    outputs = []
    for _ in range(2):
        out = io.StringIO()
        _build_registry([]).run(["plugin"], environ={}, stdout=out, settings=settings)
        outputs.append(out.getvalue())
    assert outputs[0] == outputs[1]


def test_execution_pass_dispatches_by_name(settings: Settings, stdout: io.StringIO) -> None:
    calls: list[str] = []
    registry = _build_registry(calls)
    environ = {"kak_buffile": "/tmp/n.md"}
    registry.run(["plugin", "open-note", "0", "todo"], environ=environ, stdout=stdout, settings=settings)
    registry.run(["plugin", "notes", "1"], environ={}, stdout=stdout, settings=settings)
    assert calls == ["open:todo:/tmp/n.md", "notes:1"]


def test_unknown_command_is_protocol_error(settings: Settings, stdout: io.StringIO) -> None:
    registry = _build_registry([])
    with pytest.raises(UnknownCommandError, match="removed"):
        registry.run(["plugin", "removed", "0"], environ={}, stdout=stdout, settings=settings)


def test_main_definition_pass(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("KAK_BRIDGE_HOST_COMMAND", "python3 '/opt/my plugin.py'")
    status = main(_build_registry([]), ["plugin.py"])
    captured = capsys.readouterr()
    assert status == EXIT_OK
    assert "python3 '/opt/my plugin.py' \"notes\" 0" in captured.out


def test_main_reports_body_failure_through_editor(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAK_BRIDGE_HOST_COMMAND", "kp")
    registry = CommandRegistry()

    @registry.command()
    def save(_kak: Kak) -> None:
        msg = "boom"
        raise OSError(msg)

    status = main(registry, ["kp", "save", "0"])
    captured = capsys.readouterr()
    assert status == EXIT_OK
    assert captured.out == 'fail "kak-bridge: save: boom"\n'


def test_main_stale_index_exits_with_protocol_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAK_BRIDGE_HOST_COMMAND", "kp")
    status = main(_build_registry([]), ["kp", "notes", "2"])
    captured = capsys.readouterr()
    assert status == EXIT_PROTOCOL_ERROR
    assert captured.out == ""
    assert "notes block unavailable: 2" in captured.err


def test_main_rejects_invalid_configuration(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("KAK_BRIDGE_HOST_COMMAND", "kp")
    monkeypatch.setenv("KAK_BRIDGE_QUOTE_STYLE", "single")
    status = main(_build_registry([]), ["kp"])
    captured = capsys.readouterr()
    assert status == EXIT_CONFIG_ERROR
    assert "KAK_BRIDGE_QUOTE_STYLE" in captured.err
