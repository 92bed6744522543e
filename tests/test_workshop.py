import pytest

from gapviz.pipelines.run_workshop import SECTIONS, gen_combine, main, run_workshop


def test_full_workshop_writes_every_figure(gap_csv, tmp_path, capsys):
    figures = tmp_path / "figures"
    status = run_workshop(data_path=gap_csv, figures_dir=figures)

    assert list(status) == list(SECTIONS)
    assert all(err is None for err in status.values())
    for name in ("life_expectancy.png", "life_expectancy.pdf", "combined_plot.pdf", "year_lifeexp_interactive.html"):
        assert (figures / name).exists(), name

    out = capsys.readouterr().out
    assert "[ERROR]" not in out
    assert "[TIMEIT] gen_publication" in out
    assert "[DONE] All 6 sections succeeded." in out


def test_high_resolution_png_replaces_default(gap_csv, tmp_path):
    import matplotlib.image as mpimg

    run_workshop(["publication"], data_path=gap_csv, figures_dir=tmp_path)
    assert mpimg.imread(tmp_path / "life_expectancy.png").shape[:2] == (1800, 2400)


def test_combined_plot_is_the_labelled_grid(gap, tmp_path):
    result = gen_combine(gap, tmp_path)
    assert result["grid"].labels == ["A", "B"]
    assert result["canvas"].overlapping_pairs() == []
    assert result["path"].read_bytes().startswith(b"%PDF")


def test_failing_section_does_not_stop_the_run(gap_csv, tmp_path, capsys):
    # no year field: sections fail at the schema check
    bad = tmp_path / "bad.csv"
    bad.write_text("country,continent\nA,Asia\n", encoding="utf-8")
    status = run_workshop(["data", "facets"], data_path=bad, figures_dir=tmp_path)
    assert set(status) == {"data", "facets"}
    assert all(err is not None for err in status.values())
    out = capsys.readouterr().out
    assert "[ERROR] data:" in out
    assert "[ERROR] facets:" in out


def test_main_exit_status(gap_csv, tmp_path):
    assert main(["--data", str(gap_csv), "--figures", str(tmp_path), "data"]) == 0
    assert main(["--data", str(tmp_path / "none.csv"), "--figures", str(tmp_path), "data"]) == 1


def test_main_rejects_unknown_section(tmp_path):
    with pytest.raises(SystemExit) as info:
        main(["--figures", str(tmp_path), "maps"])
    assert info.value.code == 2
