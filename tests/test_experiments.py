import csv

import pytest

import experiments
from stream_codec import compress_stats


@pytest.mark.parametrize("pipeline", experiments.PIPELINES)
@pytest.mark.parametrize("gen_name", ["uniform256", "zipf64", "english_like", "single_byte"])
def test_run_one_round_trips(pipeline, gen_name):
    _, data = experiments.generate_dataset(gen_name, 2048, seed=5)
    row = experiments.run_one(data, pipeline)
    assert row.correctness_ok == 1
    assert row.file_size_bytes == 2048
    assert row.compressed_bytes > 0
    assert row.pipeline == pipeline


def test_run_one_empty_input():
    pre = experiments.run_one(b"", "preamble")
    eof = experiments.run_one(b"", "pseudo_eof")
    assert pre.correctness_ok == eof.correctness_ok == 1
    assert pre.compressed_bytes == 4
    assert pre.tree_depth == 0


def test_run_one_rejects_unknown_pipeline():
    with pytest.raises(ValueError):
        experiments.run_one(b"abc", "adaptive")


def test_preamble_header_size():
    row = experiments.run_one(b"abab", "preamble")
    assert row.header_bits == 52
    assert row.payload_bits == 4
    assert row.avg_code_length == 1.0


def test_generators_are_seeded():
    assert experiments.gen_zipf_like(500, seed=9) == experiments.gen_zipf_like(500, seed=9)
    assert len(set(experiments.gen_single_byte(100, seed=1))) == 1
    assert max(experiments.gen_uniform(1000, alphabet=16, seed=2)) < 16


def test_unknown_generator_falls_back():
    name, data = experiments.generate_dataset("nope", 64, seed=1)
    assert name == "nope_fallback_uniform256"
    assert len(data) == 64


def test_main_writes_csv(tmp_path, capsys):
    rc = experiments.main([
        "--outdir", str(tmp_path), "--runs", "2",
        "--exp1_size_kb", "1", "--exp1_generators", "zipf128,single_byte",
        "--exp2_min_kb", "1", "--exp2_max_kb", "2", "--exp2_generators", "uniform256",
        "--no_plots",
    ])
    assert rc == 0
    with (tmp_path / "metrics.csv").open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    # exp1: 2 generators, exp2: 2 sizes, exp3: 5 specs; 2 runs, 2 pipelines each
    assert len(rows) == (2 + 2 + 5) * 2 * 2
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (tmp_path / "summary.csv").open(newline="", encoding="utf-8") as f:
        summary = list(csv.DictReader(f))
    assert len(summary) == (2 + 2 + 5) * 2
    assert all(s["n_runs"] == "2" for s in summary)
    assert "Correctness rate across all runs: 1.000" in capsys.readouterr().out


def test_main_writes_charts(tmp_path):
    rc = experiments.main([
        "--outdir", str(tmp_path), "--runs", "1",
        "--exp1_size_kb", "1", "--exp1_generators", "english_like",
        "--exp2_min_kb", "1", "--exp2_max_kb", "1", "--exp2_generators", "zipf64",
    ])
    assert rc == 0
    assert (tmp_path / "exp1_compression_ratio.png").exists()
    assert (tmp_path / "exp2_decode_time_zipf64.png").exists()
    assert (tmp_path / "exp3_header_size.png").exists()


@pytest.mark.parametrize("pipeline", experiments.PIPELINES)
def test_run_one_sizes_match_compress_stats(pipeline):
    data = b"This is a test" * 50
    row = experiments.run_one(data, pipeline)
    st = compress_stats(data, pipeline)
    assert (row.header_bits, row.payload_bits, row.pad_bits) == (st.header_bits, st.payload_bits, st.pad_bits)
    assert row.compressed_bytes == st.compressed_bytes
    assert row.total_ms == pytest.approx(row.encode_ms + row.decode_ms)
