import matplotlib.image as mpimg
import pytest

from gapviz.errors import ExportError
from gapviz.grammar import aes, geom_point, geom_smooth, ggplot, scale_x_log10
from gapviz.render import ggsave
from gapviz.render.export import to_inches


def _plot(gap):
    return (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp", color="continent"))
        + geom_point()
        + scale_x_log10()
        + geom_smooth(method="lm")
    )


def test_png_has_requested_pixel_size(gap, tmp_path):
    path = ggsave(tmp_path / "plot.png", plot=_plot(gap), width=4, height=3, units="in", dpi=50)
    assert path.exists()
    assert mpimg.imread(path).shape[:2] == (150, 200)


def test_units_are_converted():
    assert to_inches(2.54, "cm", 300) == pytest.approx(1.0)
    assert to_inches(25.4, "mm", 300) == pytest.approx(1.0)
    assert to_inches(600, "px", 300) == pytest.approx(2.0)
    with pytest.raises(ValueError):
        to_inches(1, "pt", 300)


@pytest.mark.parametrize("ext", ["png", "pdf", "svg"])
def test_repeated_export_is_byte_identical(gap, tmp_path, ext):
    p = _plot(gap)
    first = ggsave(tmp_path / f"a.{ext}", plot=p, width=5, height=4, dpi=72)
    second = ggsave(tmp_path / f"b.{ext}", plot=p, width=5, height=4, dpi=72)
    assert first.read_bytes() == second.read_bytes()


def test_existing_file_is_overwritten(gap, tmp_path):
    target = tmp_path / "plot.png"
    target.write_bytes(b"old")
    ggsave(target, plot=_plot(gap), width=3, height=3, dpi=30)
    assert target.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_default_plot_is_last_plot(gap, tmp_path):
    _plot(gap)
    path = ggsave(tmp_path / "last.pdf", width=4, height=3)
    assert path.read_bytes().startswith(b"%PDF")


def test_no_plot_to_save(tmp_path):
    with pytest.raises(ExportError, match="No plot"):
        ggsave(tmp_path / "nothing.png")


def test_unsupported_format(gap, tmp_path):
    with pytest.raises(ExportError, match="Unsupported"):
        ggsave(tmp_path / "plot.docx", plot=_plot(gap))


def test_missing_directory(gap, tmp_path):
    target = tmp_path / "missing" / "plot.png"
    with pytest.raises(ExportError, match="directory"):
        ggsave(target, plot=_plot(gap), width=3, height=3, dpi=30)
    assert not target.parent.exists()

    ggsave(target, plot=_plot(gap), width=3, height=3, dpi=30, create_dir=True)
    assert target.exists()


def test_export_error_is_an_io_error():
    assert issubclass(ExportError, OSError)


def test_render_errors_propagate_from_export(gap, tmp_path):
    from gapviz.errors import UnresolvedFieldError

    p = ggplot(data=gap, mapping=aes(x="gdp", y="lifeExp")) + geom_point()
    with pytest.raises(UnresolvedFieldError):
        ggsave(tmp_path / "bad.png", plot=p)
    assert not (tmp_path / "bad.png").exists()
