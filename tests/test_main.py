import pandas as pd
import pytest

from conftest import checkerboard_texture, noise_texture
from lbp_texture import LBPModel
from lbp_texture.main import main


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    # Keeps the default config/config.yaml lookup away from the working tree
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def trained_models(tmp_path, write_image, capsys):
    checker = [write_image(f"checker{i}.png", checkerboard_texture(32 + 4 * i)) for i in range(2)]
    noise = [write_image(f"noise{i}.png", noise_texture(32, seed=i)) for i in range(2)]
    checker_model = tmp_path / "checker.model"
    noise_model = tmp_path / "noise.model"
    main(['-t', str(checker_model)] + [str(p) for p in checker])
    main(['-t', str(noise_model)] + [str(p) for p in noise])
    return checker_model, noise_model


def test_train_writes_model(trained_models, capsys):
    checker_model, _ = trained_models
    lines = checker_model.read_text().splitlines()
    assert lines[0] == "24/3/10:16/2/10:8/1/10"
    assert len(lines) == 4
    assert "✓ Saved model" in capsys.readouterr().out


def test_classify_prints_scores(trained_models, write_image, capsys):
    checker_model, noise_model = trained_models
    sample = write_image("sample.png", checkerboard_texture(28))
    capsys.readouterr()

    main(['-c', str(checker_model), str(noise_model), str(sample)])

    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("checker.model: ")
    assert out[1].startswith("noise.model: ")
    float(out[0].split(": ")[1])
    assert out[2].startswith("Classified as ")


def test_classify_report(trained_models, write_image, tmp_path):
    checker_model, noise_model = trained_models
    sample = write_image("sample.png", noise_texture(30, seed=7))
    report = tmp_path / "out" / "scores.csv"

    main(['-c', str(checker_model), str(noise_model), str(sample), '--report', str(report)])

    df = pd.read_csv(report)
    assert list(df.columns) == ['model', 'score', 'best']
    assert len(df) == 2
    assert df['best'].sum() == 1
    assert df['best'].tolist() == [i == df['score'].idxmax() for i in range(len(df))]


def test_train_with_config(tmp_path, write_image):
    config = tmp_path / "config.yaml"
    config.write_text("lbp:\n  resolutions:\n    - [8, 1, 0]\n")
    image = write_image("noise.png", noise_texture(16))
    model_path = tmp_path / "noise.model"

    main(['-t', str(model_path), str(image), '--config', str(config)])

    model = LBPModel.load(model_path)
    assert model.parameters.to_string() == "8/1/0"
    assert model.sub_models[0].var_hist is None


def test_train_plot(tmp_path, write_image):
    image = write_image("noise.png", noise_texture(16))
    plot = tmp_path / "plots" / "model.png"
    main(['-t', str(tmp_path / "noise.model"), str(image), '--plot', str(plot)])
    assert plot.exists()


def test_not_enough_arguments():
    with pytest.raises(SystemExit) as exc:
        main(['-t', 'model.txt'])
    assert exc.value.code != 0


def test_missing_command():
    with pytest.raises(SystemExit) as exc:
        main(['model.txt', 'image.png'])
    assert exc.value.code != 0


def test_both_commands_rejected():
    with pytest.raises(SystemExit) as exc:
        main(['-t', '-c', 'model.txt', 'image.png'])
    assert exc.value.code != 0


def test_missing_image_exits_with_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(['-t', str(tmp_path / "m.model"), str(tmp_path / "missing.png")])
    assert exc.value.code == 1
    assert "Error" in capsys.readouterr().err


def test_invalid_model_exits_with_error(tmp_path, write_image, capsys):
    broken = tmp_path / "broken.model"
    broken.write_text("8/1/x\n")
    image = write_image("noise.png", noise_texture(16))
    with pytest.raises(SystemExit) as exc:
        main(['-c', str(broken), str(image)])
    assert exc.value.code == 1
    assert "Invalid" in capsys.readouterr().err


def test_missing_config_exits_with_error(tmp_path, write_image):
    image = write_image("noise.png", noise_texture(16))
    with pytest.raises(SystemExit) as exc:
        main(['-t', str(tmp_path / "m.model"), str(image), '--config', str(tmp_path / "nope.yaml")])
    assert exc.value.code == 1


def test_default_config_is_used(tmp_path, write_image):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.yaml").write_text("lbp:\n  resolutions:\n    - [8, 1, 4]\n")
    image = write_image("noise.png", noise_texture(16))
    model_path = tmp_path / "noise.model"

    main(['-t', str(model_path), str(image)])

    assert LBPModel.load(model_path).parameters.to_string() == "8/1/4"


def test_missing_default_config_uses_defaults(tmp_path, write_image):
    image = write_image("noise.png", noise_texture(16))
    model_path = tmp_path / "noise.model"

    main(['-t', str(model_path), str(image)])

    assert LBPModel.load(model_path).parameters.to_string() == "24/3/10:16/2/10:8/1/10"


@pytest.mark.parametrize("text", [
    "lbp:\n  resolutions: [8, 1, 10]\n",
    "lbp: [8, 1, 10]\n",
    "- lbp\n",
    "visualization: 150\n",
])
def test_malformed_config_exits_with_error(tmp_path, write_image, capsys, text):
    config = tmp_path / "bad.yaml"
    config.write_text(text)
    image = write_image("noise.png", noise_texture(16))
    with pytest.raises(SystemExit) as exc:
        main(['-t', str(tmp_path / "m.model"), str(image), '--config', str(config)])
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err
