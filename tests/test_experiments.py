import csv

import pytest

import experiments as exp
import huffman as huff


def test_run_one_reports_round_trip():
	row = exp.run_one(b"AAB")
	assert row.correctness_ok == 1
	assert row.file_size_bytes == 3
	assert row.unique_symbols == 3
	assert row.header_bits == 32
	assert row.compressed_bytes == 9
	assert row.compression_ratio == pytest.approx(3.0)


def test_run_one_on_generated_data():
	data = exp.generate_dataset("english_like", 2048, seed=5)
	assert len(data) == 2048
	row = exp.run_one(data, huff.HuffProcessor())
	assert row.correctness_ok == 1
	assert row.bits_per_symbol < 8


def test_generators_are_seeded():
	assert exp.generate_dataset("zipf64", 500, 9) == exp.generate_dataset("zipf64", 500, 9)
	assert set(exp.generate_dataset("single_symbol", 50, 0)) == {ord("A")}
	assert max(exp.generate_dataset("uniform128", 1000, 1)) < 128


def test_unknown_generator_rejected():
	with pytest.raises(ValueError):
		exp.generate_dataset("nonsense", 10, 0)


def test_csv_and_summary(tmp_path):
	rows = []
	for run_id in (1, 2):
		row = exp.run_one(exp.generate_dataset("repetitive90", 512, run_id))
		row.exp_name = "exp1_distribution"
		row.dataset_name = "repetitive90"
		row.run_id = run_id
		rows.append(row)

	exp.write_csv(tmp_path / "metrics.csv", rows)
	exp.group_summary(rows, tmp_path / "summary.csv")

	with (tmp_path / "metrics.csv").open() as f:
		assert len(list(csv.DictReader(f))) == 2
	with (tmp_path / "summary.csv").open() as f:
		summary = list(csv.DictReader(f))
	assert len(summary) == 1
	assert summary[0]["n_runs"] == "2"
	assert float(summary[0]["correctness_ok_rate"]) == 1.0


def test_main_writes_outputs(tmp_path, capsys):
	outdir = tmp_path / "results"
	status = exp.main([
		"--outdir", str(outdir), "--runs", "1",
		"--exp1_size_kb", "1", "--exp1_generators", "zipf64,single_symbol",
		"--exp2_min_kb", "1", "--exp2_max_kb", "2", "--exp2_generators", "uniform128",
	])
	assert status == 0
	assert (outdir / "metrics.csv").exists()
	assert (outdir / "summary.csv").exists()
	assert (outdir / "exp1_bits_per_symbol.png").exists()
	assert (outdir / "exp2_time_uniform128.png").exists()
	assert "Correctness rate across all runs: 1.000" in capsys.readouterr().out
