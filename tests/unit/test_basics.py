import csv
from pathlib import Path
from time import sleep

from award_intervals import config
from award_intervals.domain.models import AwardRecord
from award_intervals.infrastructure import build_dsn
from award_intervals.ingest.validator import REQUIRED_COLUMNS, validate_row
from award_intervals.storage import available_backends
from award_intervals.utils import profiler
from scripts import generate_data


def test_settings_defaults():
    settings = config.Settings(_env_file=None)
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_user == "postgres"
    assert settings.db_name == "award_intervals"
    assert settings.store_backend == "memory"
    assert settings.ingest_batch_size == 1000
    assert settings.ingest_year_min == 1900
    assert settings.ingest_year_max == 2100
    assert settings.cache_enabled is True


def test_get_settings_is_cached():
    assert config.get_settings() is config.get_settings()


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    if stats.cpu_percent is not None:
        assert isinstance(stats.cpu_percent, float)
    assert stats.as_log_extra()["profile_label"] == "sleep"


def test_available_backends_contains_known_entries():
    names = available_backends()
    assert "memory" in names
    assert "postgres" in names


def test_generate_data_writes_csv(tmp_path: Path):
    csv_path = tmp_path / "movielist.csv"
    generate_data._generate_rows_csv(csv_path, rows=5, batch_size=2, seed=123)
    assert csv_path.exists()
    with csv_path.open("r", newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f, delimiter=";"))
    # header + 5 rows = 6 lines
    assert len(rows) == 6
    assert rows[0] == list(REQUIRED_COLUMNS)
    first = dict(zip(rows[0], rows[1]))
    assert isinstance(validate_row(first), AwardRecord)


def test_build_dsn_from_settings():
    settings = config.Settings(
        _env_file=None, db_user="u", db_password="p", db_host="db", db_port=6543, db_name="awards"
    )
    assert build_dsn(settings) == "postgresql://u:p@db:6543/awards"
