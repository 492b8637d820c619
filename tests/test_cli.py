"""
Tests for the command-line interface.
"""

import pytest

from dmel import __version__
from dmel.cli import main
from dmel.examples import build_example_markov_model
from dmel.model import Variable
from dmel.serialization import model_to_json, model_to_yaml


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "model.yaml"
    path.write_text(model_to_yaml(build_example_markov_model()), encoding="utf-8")
    return str(path)


class TestTranslate:
    def test_r(self, model_file, capsys):
        assert main(["translate", "Mort[age,'Male']", "--model", model_file]) == 0
        out = capsys.readouterr().out
        assert out.strip() == 'lookupTable(Mort,age,1,"Interpolate","Linear","Natural","Right only")'

    def test_python_person_level(self, model_file, capsys):
        assert main(["translate", "age^2", "--model", model_file,
                     "--target", "python", "--person"]) == 0
        assert capsys.readouterr().out.strip() == "person.age[p]**2"

    def test_unknown_symbol_fails(self, model_file, capsys):
        assert main(["translate", "typo+1", "--model", model_file]) == 2
        assert "Unknown symbol 'typo'" in capsys.readouterr().err

    def test_lenient(self, model_file, capsys):
        with pytest.warns(UserWarning):
            assert main(["translate", "typo+1", "--model", model_file, "--lenient"]) == 0
        assert capsys.readouterr().out.strip() == "typo+1"

    def test_missing_model(self, tmp_path, capsys):
        assert main(["translate", "1", "--model", str(tmp_path / "none.yaml")]) == 2
        assert capsys.readouterr().err.startswith("error:")


class TestExport:
    def test_defaults_with_overrides(self, model_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        assert main(["export", model_file, "--output-dir", str(out_dir)]) == 0
        assert (out_dir / "model.R").exists()
        assert (out_dir / "functions.R").exists()
        assert "helpers)" in capsys.readouterr().out

    def test_config_file(self, model_file, tmp_path, capsys):
        out_dir = tmp_path / "py"
        config = tmp_path / "export.yaml"
        config.write_text(f"target: python\ntable_format: csv\noutput_dir: {out_dir}\n",
                          encoding="utf-8")
        assert main(["export", model_file, "--config", str(config)]) == 0
        assert (out_dir / "model.py").exists()
        assert (out_dir / "Trans.csv").exists()
        assert capsys.readouterr().out.count("Wrote") == 6

    def test_invalid_config(self, model_file, tmp_path, capsys):
        config = tmp_path / "export.yaml"
        config.write_text("target: julia\n", encoding="utf-8")
        assert main(["export", model_file, "--config", str(config)]) == 2
        assert "julia" in capsys.readouterr().err


class TestAnalyze:
    def test_clean(self, model_file, capsys):
        assert main(["analyze", model_file]) == 0
        out = capsys.readouterr().out
        assert "Model: Example Markov Model" in out
        assert " Tables: 4" in out
        assert "Unused variables" in out

    def test_unknown_symbols_exit_code(self, tmp_path, capsys):
        model = build_example_markov_model()
        model.variables.append(Variable(name="bad", expression="oops*2"))
        path = tmp_path / "model.json"
        path.write_text(model_to_json(model), encoding="utf-8")
        assert main(["analyze", str(path)]) == 1
        assert "oops" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_command_required():
    with pytest.raises(SystemExit):
        main([])
