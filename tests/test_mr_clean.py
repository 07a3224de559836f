import shutil
from pathlib import Path

import pytest

import mr_clean

DATA = Path(__file__).with_name("data") / "sample_matrix.tsv"


def _run(tmp_path, *extra):
    data = tmp_path / "sample.tsv"
    shutil.copy(DATA, data)
    summary = tmp_path / "summary.csv"
    out = tmp_path / "out"
    mr_clean.main([str(data), "0", "NA", f"{out}/", "--summary", str(summary), *extra])
    return data, out, summary


def test_cli_writes_cleaned_outputs(tmp_path):
    data, out, summary = _run(tmp_path)
    cleaned = out / "sample_gamma_0.00_cleaned.tsv"
    assert cleaned.read_text().splitlines() == [
        "gene\ts1\ts3",
        "g1\t1.0\t2.0",
        "g2\t3.0\t5.0",
    ]
    assert (out / "sample_gamma_0.00_cleaned.sol").read_text() == "1\t1\t0\n1\t0\t1\n"
    line = summary.read_text().strip()
    assert line.startswith(f"{data},0.000000,")
    assert line.endswith(",4,2,2")


def test_cli_appends_to_summary(tmp_path):
    _run(tmp_path)
    _, _, summary = _run(tmp_path)
    assert len(summary.read_text().splitlines()) == 2


def test_cli_reports_infeasible_floor(tmp_path):
    with pytest.raises(SystemExit):
        _run(tmp_path, "--min-rows", "3", "--min-cols", "3")


@pytest.mark.parametrize("extra", [["--min-rows", "9"]])
def test_cli_rejects_oversized_floor(tmp_path, extra):
    with pytest.raises(SystemExit):
        _run(tmp_path, *extra)


def test_cli_rejects_bad_budget(tmp_path):
    with pytest.raises(SystemExit):
        mr_clean.main([str(DATA), "1.5", "NA", f"{tmp_path}/"])


def test_output_prefix():
    assert mr_clean.output_prefix("dir/run.tsv", "out/", 0.1) == "out/run_gamma_0.10"


def test_cli_optional_binary_and_transposed_copies(tmp_path):
    _, out, _ = _run(tmp_path, "--binary", "--transpose")
    binary = out / "sample_gamma_0.00_binary.tsv"
    assert binary.read_text().splitlines()[1:] == ["g1\t1\t0\t1", "g2\t1\t1\t1", "g3\t0\t0\t1"]
    transposed = out / "sample_gamma_0.00_transposed.tsv"
    assert transposed.read_text().splitlines()[0] == "gene\tg1\tg2\tg3"


def test_cli_skips_extra_copies_by_default(tmp_path):
    _, out, _ = _run(tmp_path)
    assert not (out / "sample_gamma_0.00_binary.tsv").exists()
    assert not (out / "sample_gamma_0.00_transposed.tsv").exists()
