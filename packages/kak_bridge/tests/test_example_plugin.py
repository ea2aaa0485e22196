from __future__ import annotations

import importlib.util
import io
from pathlib import Path
from types import ModuleType

import pytest

from kak_bridge.config import Settings

PLUGIN_PATH = Path(__file__).resolve().parents[3] / "scripts" / "example_plugin.py"


@pytest.fixture
def plugin() -> ModuleType:
    spec = importlib.util.spec_from_file_location("example_plugin", PLUGIN_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(plugin: ModuleType, argv: list[str], environ: dict[str, str] | None = None) -> str:
    out = io.StringIO()
    settings = Settings(host_command=("python3", str(PLUGIN_PATH)))
    plugin.registry.run(argv, environ=environ or {}, stdout=out, settings=settings)
    return out.getvalue()


def test_definition_declares_every_command(plugin: ModuleType) -> None:
    script = _run(plugin, ["example_plugin.py"])
    headers = [line for line in script.splitlines() if line.startswith("define-command")]
    assert [h.rsplit(" ", 2)[-2] for h in headers] == ["py-where", "py-note", "py-shout"]
    assert "# kak-bridge exports: $kak_buffile $kak_cursor_line" in script
    assert "# kak-bridge exports: $kak_opt_py_notes" in script


def test_where_echoes_location(plugin: ModuleType) -> None:
    out = _run(plugin, ["p", "py-where", "0"], {"kak_buffile": "/src/a.py", "kak_cursor_line": "12"})
    assert out == 'echo "/src/a.py:12"\n'


def test_note_blocks(plugin: ModuleType) -> None:
    assert _run(plugin, ["p", "py-note", "0", 'say "hi"']) == (
        'set-option -add "global" "py_notes" "say ""hi"""\n'
    )
    out = _run(plugin, ["p", "py-note", "1", "ignored"], {"kak_opt_py_notes": "'one' 'two'"})
    assert out == 'echo "2 note(s) stored, latest: two"\n'


def test_shout_failure_is_reported_to_editor(plugin: ModuleType) -> None:
    assert _run(plugin, ["p", "py-shout", "0", "hey"]) == 'echo "HEY"\n'
    assert _run(plugin, ["p", "py-shout", "0", "  "]) == 'fail "kak-bridge: py-shout: nothing to shout"\n'
