from pathlib import Path

import pytest

from puml_gen.cli import main

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"
VEHICLE = FIXTURES / "models" / "vehicle.yaml"


def load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.mark.integration
def test_vehicle_model_matches_golden_output(tmp_path):
    main(["--model", str(VEHICLE), "--out-dir", str(tmp_path)])

    assert load_text(tmp_path / "component.puml") == load_text(
        FIXTURES / "golden" / "vehicle.puml"
    )


@pytest.mark.integration
def test_generation_is_deterministic(tmp_path):
    main(["--model", str(VEHICLE), "--out-dir", str(tmp_path / "one")])
    main(["--model", str(VEHICLE), "--out-dir", str(tmp_path / "two")])

    assert load_text(tmp_path / "one" / "component.puml") == load_text(
        tmp_path / "two" / "component.puml"
    )


@pytest.mark.integration
def test_markdown_output(tmp_path):
    main(
        [
            "--model", str(FIXTURES / "models" / "split"),
            "--out-dir", str(tmp_path),
            "--format", "md",
            "--skinparam", "shadowing=false",
        ]
    )

    assert load_text(tmp_path / "component.md") == (
        "# Split model\n"
        "\n"
        "```plantuml\n"
        "@startuml\n"
        "skinparam shadowing false\n"
        "component System {\n"
        "  port io\n"
        '  component "ctrl: Controller" {\n'
        "    port bus as ctrl.bus\n"
        "  }\n"
        "}\n"
        "@enduml\n"
        "```\n"
    )


@pytest.mark.integration
def test_stdout_with_roots_and_overrides(capsys):
    main(
        [
            "--model", str(VEHICLE),
            "--stdout",
            "--roots", "gearbox,engine",
            "--title", "Drive train",
            "--skinparam", "componentStyle=uml2",
        ]
    )

    out = capsys.readouterr().out
    assert out.startswith(
        "@startuml\n"
        "title Drive train\n"
        "skinparam componentStyle uml2\n"
        "component \"Gear Box\" {\n"
    )
    assert "\ncomponent Engine {\n" in out
    # Engine's back reference expands Vehicle, whose engine part is skipped.
    assert '  component "owner: Vehicle" {\n' in out
    assert '"engine: Engine"' not in out


@pytest.mark.integration
def test_legacy_single_root_renders_first_root_only(capsys):
    main(
        [
            "--model", str(VEHICLE),
            "--stdout",
            "--roots", "gearbox,engine",
            "--legacy-single-root",
        ]
    )

    out = capsys.readouterr().out
    assert 'component "Gear Box" {\n' in out
    assert "Engine" not in out


@pytest.mark.integration
def test_strict_fails_on_warnings(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--model", str(VEHICLE), "--out-dir", str(tmp_path), "--strict"])

    assert exc.value.code == 2
    assert "warning: type 'vehicle' connector 'dangling'" in capsys.readouterr().err
    assert not (tmp_path / "component.puml").exists()


@pytest.mark.integration
def test_validation_errors_fail(tmp_path, capsys):
    model = tmp_path / "bad.yaml"
    model.write_text("types:\n  - id: a\n  - id: a\nroots: [a]\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["--model", str(model), "--out-dir", str(tmp_path / "out")])

    assert exc.value.code == 2
    assert "error: duplicate type id 'a'" in capsys.readouterr().err


@pytest.mark.integration
def test_unknown_root_flag_fails(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--model", str(VEHICLE), "--out-dir", str(tmp_path), "--roots", "ghost"])

    assert exc.value.code == 2
    assert "Unknown root type id 'ghost'" in capsys.readouterr().err


def test_bad_skinparam_is_rejected(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--model", str(VEHICLE), "--skinparam", "novalue"])

    assert exc.value.code == 2
    assert "expected KEY=VALUE" in capsys.readouterr().err


@pytest.mark.integration
def test_model_without_title_uses_the_diagram_title(tmp_path, capsys):
    model = tmp_path / "plain.yaml"
    model.write_text("types:\n  - id: a\n    name: A\n", encoding="utf-8")

    main(["--model", str(model), "--stdout"])

    assert capsys.readouterr().out == (
        "@startuml\n"
        "title Component diagram\n"
        "component A {\n"
        "}\n"
        "@enduml\n"
    )


@pytest.mark.integration
def test_quoted_legacy_flag_is_a_validation_error(tmp_path, capsys):
    model = tmp_path / "quoted.yaml"
    model.write_text(
        "diagram:\n  legacy_single_root: \"false\"\ntypes:\n  - id: a\n",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as exc:
        main(["--model", str(model), "--stdout"])

    assert exc.value.code == 2
    assert "legacy_single_root must be true or false" in capsys.readouterr().err
