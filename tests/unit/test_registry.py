import pytest

from puml_gen.diagrams.registry import DIAGRAMS, RenderConfig, render_config_from_model


def test_config_reads_the_diagram_section():
    cfg = render_config_from_model(
        {
            "diagram": {
                "title": "Plant",
                "skinparams": {"shadowing": False},
                "legacy_single_root": True,
            }
        }
    )

    assert cfg == RenderConfig(
        title="Plant", skin_params={"shadowing": False}, legacy_single_root=True
    )


def test_overrides_win_and_skin_params_merge():
    cfg = render_config_from_model(
        {"diagram": {"title": "Plant", "skinparams": {"shadowing": False}}},
        title="Override",
        skin_params={"monochrome": True},
        legacy_single_root=None,
    )

    assert cfg.title == "Override"
    assert cfg.skin_params == {"shadowing": False, "monochrome": True}
    assert cfg.legacy_single_root is False


def test_missing_title_falls_back_to_the_diagram_title():
    cfg = render_config_from_model({})

    assert cfg.title is None
    assert [spec.title for spec in DIAGRAMS] == ["Component diagram"]


@pytest.mark.parametrize("value", ["false", "no", 0, 1])
def test_legacy_single_root_must_be_a_bool(value):
    with pytest.raises(TypeError, match="legacy_single_root must be true or false"):
        render_config_from_model({"diagram": {"legacy_single_root": value}})


def test_skinparams_must_be_a_mapping():
    with pytest.raises(TypeError, match="skinparams must be a mapping"):
        render_config_from_model({"diagram": {"skinparams": ["shadowing"]}})
