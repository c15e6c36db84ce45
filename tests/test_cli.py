import PIL.Image
import pytest

import render


def test_writes_png_file(tmp_path):
    output = tmp_path / "out" / "mandel.png"
    render.main(["--width", "8", "--height", "6", "--max-iterations", "20", "--seed", "1", "--output", str(output)])

    with PIL.Image.open(output) as image:
        assert image.size == (8, 6)
        assert image.mode == "RGBA"


def test_output_suffix_is_added(tmp_path):
    render.main(["--width", "4", "--height", "4", "--max-iterations", "5", "--output", str(tmp_path / "plain")])
    assert (tmp_path / "plain.png").exists()


def test_streams_to_stdout(capsysbinary):
    render.main(["--width", "4", "--height", "4", "--max-iterations", "10", "--palette", "smooth", "-s", "2"])
    out = capsysbinary.readouterr().out
    assert out.startswith(b"\x89PNG\r\n\x1a\n")


def test_super_sample_flag_defaults_to_four():
    parser = render.build_parser()
    assert parser.parse_args(["-s"]).samples == 4
    assert parser.parse_args(["--super-sample", "9"]).samples == 9
    assert parser.parse_args([]).samples is None


def test_center_arguments_build_the_window():
    parser = render.build_parser()
    opt = parser.parse_args(["--x-center", "-0.5", "--y-center", "0", "--x-width", "3", "--y-width", "2"])
    window = render.resolve_window(opt, parser)
    assert (window.xmin, window.ymin, window.xmax, window.ymax) == (-2.0, -1.0, 1.0, 1.0)


def test_bounds_default_to_the_full_set():
    parser = render.build_parser()
    window = render.resolve_window(parser.parse_args(["--xmax", "0.5"]), parser)
    assert (window.xmin, window.ymin, window.xmax, window.ymax) == (-2.0, -2.0, 0.5, 2.0)


@pytest.mark.parametrize(
    "argv",
    [
        ["--width", "0"],
        ["--super-sample", "0"],
        ["--xmin", "1", "--xmax", "-1"],
        ["--x-center", "0"],
        ["--x-center", "0", "--y-center", "0", "--x-width", "1", "--y-width", "1", "--xmin", "-1"],
        ["--output", "image.jpg"],
    ],
)
def test_invalid_arguments_exit(argv, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        render.main(argv)
    assert excinfo.value.code == 2


def test_pil_format_names():
    assert render._pil_format_name("jpg") == "JPEG"
    assert render._pil_format_name("tif") == "TIFF"
    assert render._pil_format_name("png") == "PNG"


def test_formats_without_alpha_are_written_as_rgb(tmp_path):
    output = tmp_path / "mandel.jpg"
    render.main(["--width", "6", "--height", "5", "--max-iterations", "10", "--format", "jpg", "--output", str(output)])

    with PIL.Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"
        assert image.size == (6, 5)


def test_unknown_format_is_rejected_before_rendering(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("render_frame must not run")

    monkeypatch.setattr(render, "render_frame", fail)
    with pytest.raises(SystemExit) as excinfo:
        render.main(["--format", "nosuchformat"])
    assert excinfo.value.code == 2


def test_writable_modes():
    assert render._writable_mode("PNG") == "RGBA"
    assert render._writable_mode("JPEG") == "RGB"
