from pathlib import Path

import pytest

import main as main_module


@pytest.fixture(autouse=True)
def _skip_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "configure_logging", lambda **_: None)


def test_main_exits_with_error_for_invalid_configuration(tmp_path: Path) -> None:
    path = tmp_path / "griffin.yaml"
    path.write_text("backends:\n  - name: Foo\n    host: foo\n    health:\n      - method: ping\n        interval: 0s\n")

    assert main_module.main(["--config", str(path)]) == main_module.EXIT_CONFIGURATION_ERROR


def test_main_exits_with_error_for_missing_configuration(tmp_path: Path) -> None:
    assert main_module.main(["-c", str(tmp_path / "missing.yaml")]) == main_module.EXIT_CONFIGURATION_ERROR


def test_main_exits_with_error_for_undecodable_configuration(tmp_path: Path) -> None:
    path = tmp_path / "griffin.yaml"
    path.write_bytes(b"backends:\n  - name: \xff\xfe\n    host: x\n")

    assert main_module.main(["--config", str(path)]) == main_module.EXIT_CONFIGURATION_ERROR


def test_main_runs_app_with_loaded_configuration(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "griffin.yaml"
    path.write_text("backends:\n  - name: Foo\n    host: foo\n    health:\n      - method: ping\n")
    served = []

    async def fake_serve(app) -> None:
        served.append(app)
        await app.http_client.aclose()

    monkeypatch.setattr(main_module, "serve", fake_serve)

    assert main_module.main(["--config", str(path)]) == main_module.EXIT_SUCCESS
    assert [backend.name for backend in served[0].configuration.backends] == ["Foo"]


def test_parser_defaults_to_griffin_yaml() -> None:
    parser = main_module.build_parser(main_module.get_config())

    assert parser.parse_args([]).config == "griffin.yaml"
