"""Unit tests for rdma_linkcheck.exporters."""

import csv
import io

import pytest
from wcwidth import wcswidth

from rdma_linkcheck.analysis.health import evaluate
from rdma_linkcheck.analysis.parser import parse
from rdma_linkcheck.errors import CollectionError
from rdma_linkcheck.exporters.csv_exporter import render_csv
from rdma_linkcheck.exporters.json_exporter import load_records, render_json
from rdma_linkcheck.exporters.prometheus_exporter import PrometheusExporter
from rdma_linkcheck.exporters.table_exporter import _truncate, render_table
from rdma_linkcheck.models import PortIdentity, PortStats, flat_columns


@pytest.fixture
def records(make_output, host):
    healthy = evaluate(parse(PortIdentity("rdma0", "mlx5_0"),
                             make_output(lane_errors=(1, 2, 3, 4)), host))
    down = evaluate(parse(PortIdentity("rdma1", "mlx5_1"),
                          make_output(state="Down", fec_bins=[5] * 16), host))
    failed = PortStats.failed(PortIdentity("rdma2", "mlx5_2"), host,
                              CollectionError("failed to start mlxlink"))
    return [healthy, down, failed]


class TestCsv:
    def test_header_and_rows(self, records):
        rows = list(csv.reader(io.StringIO(render_csv(records))))
        assert rows[0] == flat_columns()
        assert len(rows) == 4

    def test_column_order(self):
        columns = flat_columns()
        assert columns[:4] == ["host_serial", "hostname", "port", "device"]
        assert columns[4] == "fec_bin_0"
        assert columns[19] == "fec_bin_15"
        assert columns[20:24] == [f"raw_physical_errors_per_lane_{i}" for i in range(4)]
        assert columns[-2:] == ["comment", "fault"]

    def test_values(self, records):
        rows = list(csv.DictReader(io.StringIO(render_csv(records))))
        assert rows[0]["raw_physical_errors_per_lane_2"] == "3"
        assert rows[0]["fault"] == "false"
        assert rows[1]["fault"] == "true"
        assert rows[1]["fec_bin_9"] == "5"
        assert rows[2]["fec_bin_0"] == ""


class TestJson:
    def test_round_trip(self, records):
        assert load_records(render_json(records)) == records

    def test_fully_fielded(self, records):
        text = render_json(records, {"json_indent": None})
        assert "\n" not in text
        assert '"fec_histogram": [0, 0' in text
        assert text.count('"recommendation"') == 3

    def test_keeps_glyphs_unescaped(self, records):
        assert "❌" in render_json(records)


class TestTable:
    def test_hidden_columns(self, records):
        text = render_table(records, {"width": 1000})
        header = text.splitlines()[1]
        assert "bin0" in header and "bin7" in header
        assert "bin2 " not in header and "bin5" not in header
        assert "fault" not in header

    def test_link_state_glyph(self, records):
        text = render_table(records, {"width": 1000})
        assert "✅ Active" in text
        assert "❌ Down" in text
        assert "❌ Unknown" in text

    def test_one_line_per_row(self, records):
        records[0].recommendation = "line one\nline two"
        text = render_table(records, {"width": 1000})
        assert "line one line two" in text

    @pytest.mark.parametrize("width", [40, 97, 150, 233, 301])
    def test_truncated_to_display_width(self, records, width):
        text = render_table(records, {"width": width})
        assert all(wcswidth(line) <= width for line in text.splitlines())

    def test_glyphs_count_as_two_columns(self):
        assert _truncate("│ ✅ Active │", 2) == "│ "
        assert _truncate("│ ✅ Active │", 3) == "│ "
        assert _truncate("│ ✅ Active │", 4) == "│ ✅"
        assert _truncate("│ ✅ Active │", 100) == "│ ✅ Active │"


class TestPrometheus:
    def test_textfile(self, records, tmp_path):
        path = tmp_path / "linkcheck.prom"
        PrometheusExporter(prefix="rdma_linkcheck").write(records, str(path))
        text = path.read_text()
        assert "# TYPE rdma_linkcheck_port_fault gauge" in text
        assert "rdma_linkcheck_fec_histogram{" in text
        assert 'lane="3"' in text
        assert 'bin="15"' in text

    def test_gauge_values(self, records):
        registry = PrometheusExporter().build_registry(records)
        down = {"host": "gpu-node-01", "device": "rdma1", "port": "mlx5_1"}
        healthy = {"host": "gpu-node-01", "device": "rdma0", "port": "mlx5_0"}
        assert registry.get_sample_value("rdma_linkcheck_port_fault", down) == 1.0
        assert registry.get_sample_value("rdma_linkcheck_link_active", down) == 0.0
        assert registry.get_sample_value("rdma_linkcheck_link_active", healthy) == 1.0
        assert registry.get_sample_value(
            "rdma_linkcheck_raw_physical_errors", {**healthy, "lane": "3"}) == 4.0

    def test_degraded_rows_only_export_status(self, records):
        registry = PrometheusExporter().build_registry(records)
        labels = {"host": "gpu-node-01", "device": "rdma2", "port": "mlx5_2"}
        assert registry.get_sample_value("rdma_linkcheck_port_fault", labels) == 1.0
        assert registry.get_sample_value(
            "rdma_linkcheck_effective_physical_errors", labels) is None
