import pytest

from core.errors import MalformedRecordError
from utils.input_parser import InputParser


def test_parse_lines_skips_comments_and_blank_lines():
    jobs = InputParser.parse_lines([
        "# arrival,id,service\n",
        "\n",
        "0,1,5\n",
        "  1, 2, 4 \n",
    ])
    assert [(j.arrival_time, j.id, j.total_service) for j in jobs] == [(0, 1, 5), (1, 2, 4)]


@pytest.mark.parametrize("line", [
    "0,1",
    "a,1,5",
    "0,1,x",
    "-1,1,5",
    "0,1,0",
])
def test_malformed_record_is_skipped(line, capsys):
    jobs = InputParser.parse_lines(["0,7,2", line, "3,8,1"])
    assert [j.id for j in jobs] == [7, 8]
    assert "경고" in capsys.readouterr().out


def test_duplicate_id_is_skipped():
    jobs = InputParser.parse_lines(["0,1,2", "1,1,3", "2,2,1"])
    assert [(j.id, j.total_service) for j in jobs] == [(1, 2), (2, 1)]


def test_create_job_from_parts_raises_malformed():
    with pytest.raises(MalformedRecordError):
        InputParser._create_job_from_parts(["0", "1"])


def test_load_order_is_kept_for_equal_arrivals(tmp_path):
    path = tmp_path / "jobs.csv"
    path.write_text("0,3,1\n0,1,1\n0,2,1\n", encoding="utf-8")
    assert [j.id for j in InputParser.parse_file(str(path))] == [3, 1, 2]


def test_missing_file_returns_empty_list(tmp_path, capsys):
    assert InputParser.parse_file(str(tmp_path / "missing.csv")) == []
    assert "찾을 수 없습니다" in capsys.readouterr().out


def test_saved_jobs_can_be_loaded_again(tmp_path):
    jobs = InputParser.generate_random_jobs(num_jobs=4, seed=5)
    path = tmp_path / "generated.csv"
    InputParser.save_jobs_to_file(jobs, str(path))
    loaded = InputParser.parse_file(str(path))
    assert [(j.arrival_time, j.id, j.total_service) for j in loaded] == \
           [(j.arrival_time, j.id, j.total_service) for j in jobs]


def test_random_jobs_are_reproducible_and_sorted():
    first = InputParser.generate_random_jobs(num_jobs=8, seed=3)
    second = InputParser.generate_random_jobs(num_jobs=8, seed=3)
    assert [(j.id, j.arrival_time, j.total_service) for j in first] == \
           [(j.id, j.arrival_time, j.total_service) for j in second]
    arrivals = [j.arrival_time for j in first]
    assert arrivals == sorted(arrivals)
    assert all(j.total_service >= 1 for j in first)


def test_print_job_table(capsys):
    InputParser.print_job_table(InputParser.parse_lines(["0,1,5", "1,22,4"]))
    out = capsys.readouterr().out
    assert "JOB TABLE" in out
    assert "22" in out
