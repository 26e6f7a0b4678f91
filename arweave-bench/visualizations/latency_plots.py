"""
Latency and throughput plots across payload sizes.
"""

import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from .base import BasePlotter

logger = logging.getLogger(__name__)

PHASES = [
    ('upload_ms', 'Upload', 'skyblue'),
    ('availability_ms', 'Gateway availability', 'lightcoral'),
    ('download_ms', 'Download', 'lightgreen'),
]


class LatencyPlotter(BasePlotter):
    """Plotter for per-phase latency and throughput by payload size."""

    def create_phase_latency_plot(self):
        """Grouped bars of mean latency per phase for every payload size."""
        data = self.filter_available_runs()
        if data is None or len(data) == 0:
            logger.warning("No data available for phase latency plot")
            return None

        try:
            means = data.groupby('size_bytes')[[col for col, _, _ in PHASES]].mean()
            labels = self.get_size_labels(data)
            x = np.arange(len(means))
            width = 0.25

            fig, ax = plt.subplots(figsize=(12, 8))
            for i, (col, label, color) in enumerate(PHASES):
                ax.bar(x + (i - 1) * width, means[col] / 1000, width, label=label,
                       color=color, edgecolor='black', alpha=0.8)

            ax.set_title('Mean Latency per Phase by Payload Size', fontsize=14)
            ax.set_xlabel('Payload size', fontsize=12)
            ax.set_ylabel('Latency (s)', fontsize=12)
            ax.set_xticks(x)
            ax.set_xticklabels(labels)
            ax.legend()
            ax.grid(True, alpha=0.3, axis='y')
            plt.tight_layout()

            output_file = os.path.join(self.output_dir, 'phase_latency.png')
            plt.savefig(output_file, dpi=300, bbox_inches='tight')
            plt.close()

            logger.info(f"Created phase latency plot: {output_file}")
            return output_file

        except Exception as e:
            logger.error(f"Failed to create phase latency plot: {e}")
            plt.close('all')
            return None

    def create_throughput_plot(self):
        """Upload and download throughput against payload size (log x axis)."""
        data = self.filter_available_runs()
        if data is None or len(data) == 0:
            logger.warning("No data available for throughput plot")
            return None

        try:
            plt.figure(figsize=(12, 8))
            plt.scatter(data['size_bytes'], data['upload_mbps'], label='Upload',
                        color='steelblue', alpha=0.7)
            plt.scatter(data['size_bytes'], data['download_mbps'], label='Download',
                        color='darkorange', alpha=0.7)

            means = data.groupby('size_bytes')[['upload_mbps', 'download_mbps']].mean()
            plt.plot(means.index, means['upload_mbps'], color='steelblue', linewidth=2)
            plt.plot(means.index, means['download_mbps'], color='darkorange', linewidth=2)

            plt.xscale('log')
            plt.title('Throughput by Payload Size', fontsize=14)
            plt.xlabel('Payload size (bytes, log scale)', fontsize=12)
            plt.ylabel('Throughput (MB/s)', fontsize=12)
            plt.legend()
            plt.grid(True, alpha=0.3)
            plt.tight_layout()

            output_file = os.path.join(self.output_dir, 'throughput_by_size.png')
            plt.savefig(output_file, dpi=300, bbox_inches='tight')
            plt.close()

            logger.info(f"Created throughput plot: {output_file}")
            return output_file

        except Exception as e:
            logger.error(f"Failed to create throughput plot: {e}")
            plt.close('all')
            return None

    def create_all_plots(self):
        """Create all available plots."""
        plots = [self.create_phase_latency_plot(), self.create_throughput_plot()]
        plots = [p for p in plots if p is not None]
        logger.info(f"Created {len(plots)} plots in {self.output_dir}")
        return plots
