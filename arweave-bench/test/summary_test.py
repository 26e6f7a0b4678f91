"""
Tests for result summaries and plots.
"""

import json
import tempfile
import unittest
import sys
import os

import matplotlib
matplotlib.use("Agg")

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from persistence.summary import ResultsSummary
from visualizations.latency_plots import LatencyPlotter


def make_report(tx_id, size_bytes, size, upload_ms, download_ms, integrity="PASS", available=True):
    return {
        "timestamp": "2024-05-01T12:00:00.000Z",
        "gateway": "https://arweave.net",
        "fileSize": {"bytes": size_bytes, "humanReadable": size},
        "upload": {"latencyMs": upload_ms, "throughputMBps": size_bytes / upload_ms / 1000,
                   "throughputMBpsFormatted": "0.00"},
        "gatewayAvailability": {"latencyMs": 4000, "available": available, "lastStatus": "200 OK"},
        "download": {"latencyMs": download_ms, "throughputMBps": size_bytes / download_ms / 1000,
                     "throughputMBpsFormatted": "0.00"},
        "integrityCheck": integrity,
        "transaction": {"id": tx_id, "url": f"https://arweave.net/{tx_id}"},
    }


class TestResultsSummary(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        reports = [
            make_report("a", 10240, "10KB", 1000, 100),
            make_report("b", 10240, "10KB", 3000, 300, integrity="FAIL"),
            make_report("c", 10485760, "10MB", 20000, 2000),
        ]
        for report in reports:
            path = os.path.join(self.tmp.name, f"arweave-test-{report['transaction']['id']}.json")
            with open(path, "w") as f:
                json.dump(report, f)
        with open(os.path.join(self.tmp.name, "arweave-test-error-123.json"), "w") as f:
            json.dump({"timestamp": "2024-05-01T12:00:00.000Z", "error": "boom"}, f)
        with open(os.path.join(self.tmp.name, "arweave-read-x-1.json"), "w") as f:
            json.dump({"timestamp": "2024-05-01T12:00:00.000Z"}, f)

    def tearDown(self):
        self.tmp.cleanup()

    def test_loads_latency_reports_only(self):
        summary = ResultsSummary(self.tmp.name)

        self.assertEqual(len(summary.report_files()), 3)
        self.assertEqual(len(summary.data), 3)
        self.assertEqual(sorted(summary.data["tx_id"]), ["a", "b", "c"])

    def test_by_size(self):
        table = ResultsSummary(self.tmp.name).by_size()

        small = table[table["size"] == "10KB"].iloc[0]
        self.assertEqual(small["runs"], 2)
        self.assertEqual(small["upload_ms_mean"], 2000)
        self.assertEqual(small["download_ms_median"], 200)
        self.assertEqual(small["pass_rate"], 0.5)
        large = table[table["size"] == "10MB"].iloc[0]
        self.assertEqual(large["runs"], 1)
        self.assertEqual(large["pass_rate"], 1.0)

    def test_save_csv(self):
        output = os.path.join(self.tmp.name, "out", "summary.csv")

        path = ResultsSummary(self.tmp.name).save_csv(output)

        self.assertEqual(path, output)
        saved = pd.read_csv(output)
        self.assertEqual(len(saved), 2)
        self.assertIn("availability_ms_mean", saved.columns)

    def test_empty_directory(self):
        with tempfile.TemporaryDirectory() as empty:
            summary = ResultsSummary(empty)
            self.assertTrue(summary.data.empty)
            self.assertTrue(summary.by_size().empty)
            self.assertIsNone(summary.save_csv(os.path.join(empty, "summary.csv")))

    def test_plots(self):
        summary = ResultsSummary(self.tmp.name)
        plot_dir = os.path.join(self.tmp.name, "plots")

        plots = LatencyPlotter(summary.data, plot_dir).create_all_plots()

        self.assertEqual(len(plots), 2)
        for plot in plots:
            self.assertTrue(os.path.exists(plot))

    def test_plots_without_data(self):
        with tempfile.TemporaryDirectory() as empty:
            plots = LatencyPlotter(ResultsSummary(empty).data, empty).create_all_plots()
        self.assertEqual(plots, [])


if __name__ == '__main__':
    unittest.main()
