"""
Base classes for plot visualization.
"""

import os
import logging

import pandas as pd

logger = logging.getLogger(__name__)


class BasePlotter:
    """Base class for all plotters with common functionality."""

    def __init__(self, data: pd.DataFrame, output_dir: str):
        self.data = data
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def filter_available_runs(self):
        """Filter data to runs where the gateway served the payload."""
        if self.data is None or len(self.data) == 0:
            return None
        return self.data[self.data['available'] == True]  # noqa: E712

    def get_size_labels(self, data: pd.DataFrame):
        """Size tokens ordered by byte count."""
        ordered = data.drop_duplicates('size_bytes').sort_values('size_bytes')
        return list(ordered['size'])
