"""
Concurrent read access to shared records.

Records and fields are not modified by queries, so one parsed record can be
queried from many threads at once. Locator plans are shared through the
plan cache.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from pica import Record, clear_locator_cache


QUERIES = [
    ("!021A$a", "Ueber den Prozess der Zivilisation"),
    ("+041A$9", ["104194010", "104194029"]),
    ("028C/02$d", "Jane"),
    ("?010@$a", "ger"),
    ("*045E$a|045F$a", ["DDC301", "DDC306.4"]),
]


class TestSharedRecord:
    """Query a single record from several threads."""

    @pytest.mark.parametrize("workers", [2, 4, 8])
    def test_parallel_get(self, sample_record, workers):
        jobs = QUERIES * 50

        def run(job):
            query, expected = job
            value, error = sample_record.get(query)
            return value == expected and error is None

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(run, jobs))

        assert len(results) == len(jobs)
        assert all(results)

    def test_parallel_map(self, sample_record):
        mapping = {
            "title": "!021A$a",
            "authors": ("*028A|028C", "a"),
            "ddc": ("*045E", "a", {"find": r"^DDC(\d+)"}),
        }
        expected = sample_record.map(mapping)

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(lambda _: sample_record.map(mapping), range(100)))

        assert all(result == expected for result in results)
        assert expected[0]["authors"] == ["Elias", "Doe", "Roe"]

    def test_record_unchanged_after_queries(self, sample_record):
        before = str(sample_record)

        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(lambda job: sample_record.all(job[0]), QUERIES * 20))

        assert str(sample_record) == before

    def test_cache_clear_while_querying(self, sample_text):
        record = Record.parse(sample_text)

        def run(i):
            if i % 10 == 0:
                clear_locator_cache()
            return record.first("021A$h")

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(run, range(200)))

        assert set(results) == {"Norbert Elias"}
