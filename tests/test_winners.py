"""Tests for the winner selector."""

from datetime import datetime, timezone

import orjson
import pytest

from sweep.winners import archive_name, main, select_winners


NOW = datetime(2025, 6, 1, 14, 5, 9)


def write_record(folder, name, guess_ratio, checks=10, fingerprint=None):
    folder.mkdir(parents=True, exist_ok=True)
    data = {
        "fingerprint": fingerprint or f"fp-{name}",
        "guessRatio": guess_ratio,
        "checks": checks,
        "startDate": "2025-06-01T10:00:00Z",
        "endDate": "2025-06-01T12:00:00Z",
        "configuration": {"SENTIMENT_THRESHOLD": "55"},
    }
    path = folder / f"{name}.json"
    path.write_bytes(orjson.dumps(data))
    return path


def load_archive(path):
    return orjson.loads(path.read_bytes())


class TestSelectWinners:
    def test_top_five_by_guess_ratio(self, tmp_path):
        perf = tmp_path / "performance"
        for i, ratio in enumerate([0.9, 0.8, 0.8, 0.5, 0.3, 0.1, 0.0]):
            write_record(perf, f"r{i}", ratio)

        path = select_winners(tmp_path, top_k=5, now=NOW)

        winners = load_archive(path)
        assert [w["guessRatio"] for w in winners] == [0.9, 0.8, 0.8, 0.5, 0.3]

    def test_archive_name_contains_date(self, tmp_path):
        write_record(tmp_path / "performance", "r0", 0.5)
        path = select_winners(tmp_path, now=NOW)

        assert path.parent == tmp_path / "winners"
        assert path.name == "winners-01-06-2025:14:05:09.json"

    def test_default_now_uses_current_date(self, tmp_path):
        write_record(tmp_path / "performance", "r0", 0.5)
        path = select_winners(tmp_path)
        assert datetime.now().strftime("%d-%m-%Y") in path.name

    def test_tie_broken_by_checks(self, tmp_path):
        perf = tmp_path / "performance"
        write_record(perf, "few", 0.8, checks=3)
        write_record(perf, "many", 0.8, checks=40)
        write_record(perf, "top", 0.9, checks=1)

        winners = load_archive(select_winners(tmp_path, now=NOW))
        assert [w["fingerprint"] for w in winners] == ["fp-top", "fp-many", "fp-few"]

    def test_scans_all_performance_folders(self, tmp_path):
        write_record(tmp_path / "performance", "a", 0.4)
        write_record(tmp_path / "performance-old", "b", 0.7)
        write_record(tmp_path / "other", "c", 1.0)

        winners = load_archive(select_winners(tmp_path, now=NOW))
        assert [w["fingerprint"] for w in winners] == ["fp-b", "fp-a"]

    def test_malformed_files_are_skipped(self, tmp_path, caplog):
        perf = tmp_path / "performance"
        write_record(perf, "good", 0.6)
        (perf / "broken.json").write_text("{oops")
        (perf / "partial.json").write_text('{"guessRatio": 0.99}')
        (perf / "notes.txt").write_text("ignored")

        winners = load_archive(select_winners(tmp_path, now=NOW))

        assert [w["fingerprint"] for w in winners] == ["fp-good"]
        assert "Skipping malformed performance record" in caplog.text

    def test_fewer_records_than_top_k(self, tmp_path):
        write_record(tmp_path / "performance", "only", 0.2)
        assert len(load_archive(select_winners(tmp_path, top_k=5, now=NOW))) == 1

    def test_no_records_writes_empty_archive(self, tmp_path):
        (tmp_path / "performance").mkdir()
        assert load_archive(select_winners(tmp_path, now=NOW)) == []

    def test_never_overwrites_previous_archive(self, tmp_path):
        write_record(tmp_path / "performance", "r0", 0.5)
        first = select_winners(tmp_path, now=NOW)
        first_content = first.read_bytes()

        write_record(tmp_path / "performance", "r1", 0.9)
        second = select_winners(tmp_path, now=NOW)

        assert first != second
        assert second.name == "winners-01-06-2025:14:05:09-1.json"
        assert first.read_bytes() == first_content

    def test_output_uses_record_key_names(self, tmp_path):
        write_record(tmp_path / "performance", "r0", 0.5)
        winner = load_archive(select_winners(tmp_path, now=NOW))[0]
        assert set(winner) >= {"fingerprint", "guessRatio", "checks", "startDate", "endDate", "configuration"}


class TestArchiveName:
    def test_format(self):
        assert archive_name(NOW) == "winners-01-06-2025:14:05:09.json"
        assert archive_name(NOW, 2) == "winners-01-06-2025:14:05:09-2.json"


class TestMain:
    def test_success_exit_code(self, tmp_path):
        write_record(tmp_path / "performance", "r0", 0.5)
        assert main(["--log-dir", str(tmp_path), "--top", "3"]) == 0
        assert len(list((tmp_path / "winners").iterdir())) == 1

    def test_missing_log_dir_exit_code(self, tmp_path):
        assert main(["--log-dir", str(tmp_path / "missing")]) == 1

    @pytest.mark.parametrize("top", ["0", "-1", "three"])
    def test_top_below_one_is_rejected(self, tmp_path, top):
        write_record(tmp_path / "performance", "r0", 0.5)
        with pytest.raises(SystemExit) as exc:
            main(["--log-dir", str(tmp_path), "--top", top])
        assert exc.value.code == 2
        assert not (tmp_path / "winners").exists()
