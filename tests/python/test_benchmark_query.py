"""
Benchmark tests for parsing and querying PICA+ records.
"""

import pytest
from pica import Record, parse_locator


class TestParsingBenchmarks:
    """Benchmarks for parsing operations."""

    @pytest.mark.benchmark
    def test_parse_sample(self, benchmark, sample_text):
        """Benchmark parsing a single record."""
        record = benchmark(Record.parse, sample_text)
        assert len(record) == 25

    @pytest.mark.benchmark
    def test_parse_large(self, benchmark, large_text):
        """Benchmark parsing 5,000 fields."""
        record = benchmark(Record.parse, large_text)
        assert len(record) == 25 * 200

    @pytest.mark.benchmark
    def test_parse_locators(self, benchmark):
        """Benchmark locator parsing with the plan cache warm."""
        locators = ["021A$a", "!028A$a|028C$a", "045E/xx$e", "?003@$0"]

        def parse_all():
            return [parse_locator(text) for text in locators]

        result = benchmark(parse_all)
        assert len(result) == 4


class TestQueryBenchmarks:
    """Benchmarks for queries on a large record."""

    @pytest.fixture
    def large_record(self, large_text):
        return Record.parse(large_text)

    @pytest.mark.benchmark
    def test_first_value(self, benchmark, large_record):
        """Benchmark first() on a record with many fields."""
        result = benchmark(large_record.first, "021A$h")
        assert result == "Norbert Elias"

    @pytest.mark.benchmark
    def test_all_values(self, benchmark, large_record):
        """Benchmark all() collecting values of repeated fields."""
        result = benchmark(large_record.all, "028A|028C", "a")
        assert len(result) == 3 * 200

    @pytest.mark.benchmark
    def test_all_values_with_filter(self, benchmark, large_record):
        """Benchmark all() with a pattern filter."""
        filters = {"find": r"^DDC([\d.]+)$"}
        result = benchmark(large_record.all, "045E$a|045F$a", None, filters)
        assert len(result) == 2 * 200

    @pytest.mark.benchmark
    def test_map(self, benchmark, large_record):
        """Benchmark map() with several queries."""
        mapping = {
            "title": "021A$a",
            "subjects": ("*041A", "8"),
            "persons": ("*028A|028C", "a"),
        }
        values, errors = benchmark(large_record.map, mapping)
        assert len(values["persons"]) == 3 * 200
        assert errors == {}
