import logging

import numpy as np
import pytest
from PIL import Image

from qoistream import CodecConfig, decode, output_path
from qoistream.cli import main
from qoistream.converter import image_format_for, image_to_qoi, qoi_to_image


@pytest.fixture
def pixels():
    rng = np.random.default_rng(42)
    return rng.integers(0, 4, (6, 5, 3), dtype=np.uint8)


def test_output_path_uses_stem(tmp_path):
    assert output_path("some/dir/photo.raw", ".qoi", tmp_path) == tmp_path / "photo.qoi"
    assert output_path("photo.tar.raw", ".qoi").name == "photo.tar.qoi"
    assert output_path("photo.raw", ".qoi").parent.name == ""


def test_config_defaults_and_validation():
    cfg = CodecConfig()
    assert cfg.colorspace == 0
    assert cfg.strict_end_marker
    assert (cfg.qoi_extension, cfg.raw_extension) == (".qoi", ".raw")
    with pytest.raises(ValueError):
        CodecConfig(colorspace=300)
    with pytest.raises(ValueError):
        CodecConfig(qoi_extension="qoi")


def test_encode_then_decode(tmp_path, pixels):
    raw = tmp_path / "input.bin"
    raw.write_bytes(pixels.tobytes())

    assert main(["encode", str(raw), "5", "6", "3", "--colorspace", "1", "--out-dir", str(tmp_path)]) == 0
    qoi_file = tmp_path / "input.qoi"
    decoded = decode(qoi_file.read_bytes())
    assert decoded[1:] == (5, 6, 3, 1)

    out_dir = tmp_path / "out"
    assert main(["decode", str(qoi_file), "--out-dir", str(out_dir)]) == 0
    assert (out_dir / "input.raw").read_bytes() == pixels.tobytes()


def test_encode_wrong_size_fails(tmp_path, caplog):
    raw = tmp_path / "short.bin"
    raw.write_bytes(bytes(10))

    with caplog.at_level(logging.ERROR):
        assert main(["encode", str(raw), "5", "6", "3", "--out-dir", str(tmp_path)]) == 1
    assert not (tmp_path / "short.qoi").exists()
    assert "encode failed" in caplog.text


def test_decode_bad_magic_fails(tmp_path):
    bad = tmp_path / "bad.qoi"
    bad.write_bytes(b"nope" + bytes(30))
    assert main(["decode", str(bad), "--out-dir", str(tmp_path)]) == 1
    assert not (tmp_path / "bad.raw").exists()


def test_decode_lenient_marker(tmp_path):
    path = tmp_path / "tail.qoi"
    path.write_bytes(b"qoif" + bytes([0, 0, 0, 1, 0, 0, 0, 1, 3, 0, 0xC0]) + b"\xff" * 8)

    assert main(["decode", str(path), "--out-dir", str(tmp_path)]) == 1
    assert main(["decode", str(path), "--lenient", "--out-dir", str(tmp_path)]) == 0
    assert (tmp_path / "tail.raw").read_bytes() == bytes(3)


def test_missing_input_fails(tmp_path):
    assert main(["decode", str(tmp_path / "missing.qoi")]) == 1


def test_invalid_channels_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["encode", str(tmp_path / "x.bin"), "1", "1", "2"])
    assert exc.value.code == 2


def test_image_round_trip(tmp_path, pixels):
    png = tmp_path / "tiles.png"
    Image.fromarray(pixels).save(png)

    assert main(["from-image", str(png), "--out-dir", str(tmp_path)]) == 0
    assert main(["to-image", str(tmp_path / "tiles.qoi"), "--out-dir", str(tmp_path / "back")]) == 0

    back = np.array(Image.open(tmp_path / "back" / "tiles.png"))
    assert np.array_equal(back, pixels)


def test_converter_rgba(tmp_path):
    rgba = np.zeros((3, 4, 4), dtype=np.uint8)
    rgba[..., 3] = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
    png = tmp_path / "alpha.png"
    Image.fromarray(rgba).save(png)

    size = image_to_qoi(png, tmp_path / "alpha.qoi")
    assert size == (tmp_path / "alpha.qoi").stat().st_size

    qoi_to_image(tmp_path / "alpha.qoi", tmp_path / "alpha_back.png", image_format="png")
    img = Image.open(tmp_path / "alpha_back.png")
    assert img.mode == "RGBA"
    assert np.array_equal(np.array(img), rgba)


def test_image_format_names():
    assert image_format_for("png") == "PNG"
    assert image_format_for("jpg") == "JPEG"
    assert image_format_for("JPEG") == "JPEG"
    with pytest.raises(ValueError):
        image_format_for("xyz")


def test_to_image_jpg(tmp_path, pixels):
    qoi_file = tmp_path / "tiles.qoi"
    Image.fromarray(pixels).save(tmp_path / "tiles.png")
    image_to_qoi(tmp_path / "tiles.png", qoi_file)

    assert main(["to-image", str(qoi_file), "--format", "jpg", "--out-dir", str(tmp_path)]) == 0
    with Image.open(tmp_path / "tiles.jpg") as img:
        assert img.format == "JPEG"
        assert img.size == (5, 6)


def test_to_image_unknown_format_fails(tmp_path, pixels, caplog):
    qoi_file = tmp_path / "tiles.qoi"
    Image.fromarray(pixels).save(tmp_path / "tiles.png")
    image_to_qoi(tmp_path / "tiles.png", qoi_file)

    with caplog.at_level(logging.ERROR):
        assert main(["to-image", str(qoi_file), "--format", "xyz", "--out-dir", str(tmp_path)]) == 1
    assert not (tmp_path / "tiles.xyz").exists()
    assert "Unsupported image format" in caplog.text
