"""Unit tests for image_migrator/work_list.py"""

import pytest

from image_migrator.work_list import PairListBuilder, WorkList, build_pair


class TestBuildPair:
    """Tests for build_pair"""

    def test_destination_nests_namespace_under_group(self):
        """Test the source and destination naming"""
        pair = build_pair("src.example.com:5000", "quay.example.com", "aro-group", "ns1", "app", "v2")

        assert str(pair.source) == "src.example.com:5000/ns1/app:v2"
        assert str(pair.destination) == "quay.example.com/aro-group/ns1/app:v2"
        assert pair.destination.repository_path == "aro-group/ns1/app"


class TestWorkList:
    """Tests for WorkList persistence"""

    def test_read_returns_pairs_in_file_order(self, tmp_path):
        """Test that pairs come back in the order they were written"""
        work_list = WorkList(str(tmp_path / "imagepairs.txt"))
        work_list.truncate()
        first = build_pair("s.io", "d.io", "g", "ns1", "b", "1")
        second = build_pair("s.io", "d.io", "g", "ns1", "a", "1")
        work_list.append(first)
        work_list.append(second)

        assert work_list.read() == [first, second]

    def test_skips_blank_and_malformed_lines(self, tmp_path):
        """Test that unusable lines are skipped"""
        path = tmp_path / "imagepairs.txt"
        path.write_text("\ns.io/ns1/a:1 d.io/g/ns1/a:1\nonly-one-token\n\n")

        pairs = WorkList(str(path)).read()

        assert [str(p.source) for p in pairs] == ["s.io/ns1/a:1"]

    def test_missing_file_raises(self, tmp_path):
        """Test that resuming without a work list is an error"""
        with pytest.raises(FileNotFoundError):
            WorkList(str(tmp_path / "missing.txt")).read()


class TestPairListBuilder:
    """Tests for PairListBuilder"""

    def test_start_truncates_previous_run(self, tmp_path):
        """Test that the work list is truncated once per planning run"""
        path = tmp_path / "imagepairs.txt"
        path.write_text("s.io/ns1/old:1 d.io/g/ns1/old:1\n")
        builder = PairListBuilder(WorkList(str(path)), "s.io", "d.io", "g")

        builder.start()
        builder.add("ns1", "app", "v1")
        builder.add("ns1", "app", "v2")

        assert path.read_text() == "s.io/ns1/app:v1 d.io/g/ns1/app:v1\ns.io/ns1/app:v2 d.io/g/ns1/app:v2\n"
        assert len(builder.pairs) == 2
