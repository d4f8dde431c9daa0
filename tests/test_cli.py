"""
Tests for the batch CLI.
"""
import pandas as pd

from facet_search.cli import main


def test_prints_requested_page(snapshot_json, capsys):
    code = main([
        "--snapshot", str(snapshot_json),
        "--url", "/zasoby/matematyka/algebra",
        "--sort", "alphabetical",
        "--page-size", "2",
    ])
    out = capsys.readouterr().out

    assert code == 0
    assert "Page 1/2 (1-2 of 4)" in out
    assert "Algebra basics [r4]" in out


def test_level_and_language_flags(snapshot_json, capsys):
    main([
        "--snapshot", str(snapshot_json),
        "--level", "l-basic",
        "--language", "pl",
    ])
    out = capsys.readouterr().out
    assert "[r2]" in out and "[r8]" in out
    assert "[r1]" not in out


def test_no_matches(snapshot_json, capsys):
    main(["--snapshot", str(snapshot_json), "--url", "/zasoby?q=zzzznomatch"])
    assert "No resources match." in capsys.readouterr().out


def test_writes_sorted_csv(snapshot_json, tmp_path):
    out = tmp_path / "out" / "resources.csv"
    code = main([
        "--snapshot", str(snapshot_json),
        "--url", "/zasoby/matematyka",
        "--sort", "popular",
        "--out", str(out),
    ])

    assert code == 0
    df = pd.read_csv(out, dtype=str)
    assert len(df) == 8
    assert df["id"].tolist()[:3] == ["r3", "r1", "r2"]
    assert "title" in df.columns
