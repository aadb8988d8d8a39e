import json

import pytest

from sprite_atlas_packer.cli import main


def write_config(tmp_path, sprite_tree, **overrides):
    document = {
        "name": "sheet",
        "output_path": str(tmp_path / "build"),
        "folders": [str(sprite_tree)],
    }
    document.update(overrides)
    path = tmp_path / "packer.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_cli_packs_atlas(sprite_tree, tmp_path, capsys):
    config_path = write_config(tmp_path, sprite_tree)

    assert main([str(config_path)]) == 0

    assert (tmp_path / "build" / "sheet.png").exists()
    assert (tmp_path / "build" / "sheet.json").exists()
    assert "Packed 4 sprites" in capsys.readouterr().out


def test_cli_output_type_override(sprite_tree, tmp_path):
    config_path = write_config(tmp_path, sprite_tree)

    assert main([str(config_path), "--output-type", "yaml"]) == 0

    assert (tmp_path / "build" / "sheet.yaml").exists()
    assert not (tmp_path / "build" / "sheet.json").exists()


def test_cli_reports_failures(sprite_tree, tmp_path):
    config_path = write_config(tmp_path, sprite_tree, options={"max_size": 16})

    with pytest.raises(SystemExit) as excinfo:
        main([str(config_path), "-v"])

    assert "larger than the maximum atlas size" in str(excinfo.value)
    assert not (tmp_path / "build").exists()


def test_cli_rejects_unknown_output_type(sprite_tree, tmp_path):
    config_path = write_config(tmp_path, sprite_tree)

    with pytest.raises(SystemExit):
        main([str(config_path), "--output-type", "ron"])


def test_cli_reports_missing_template_file(sprite_tree, tmp_path):
    config_path = write_config(
        tmp_path, sprite_tree, output_type="template", template_path=str(tmp_path / "nope.txt")
    )

    with pytest.raises(SystemExit) as excinfo:
        main([str(config_path)])

    assert "nope.txt" in str(excinfo.value)
    assert not (tmp_path / "build").exists()


def test_cli_reports_template_errors(sprite_tree, tmp_path):
    template_path = tmp_path / "broken.txt"
    template_path.write_text("{{ atlas.nothing_here }}", encoding="utf-8")
    config_path = write_config(tmp_path, sprite_tree, output_type="template", template_path=str(template_path))

    with pytest.raises(SystemExit):
        main([str(config_path)])
    assert not (tmp_path / "build").exists()
