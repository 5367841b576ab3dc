"""
Shared helpers for the magsort subcommands.
"""
from collections import Counter
import sys

from tqdm import tqdm as _tqdm


class Summary(Counter):
    """Counter of named events, printed as an aligned table at the end of a run."""

    def print_stats(self, name=None, value_width=15, print_to=None):
        """
        Prints stats in nice table with two column for the key and value pairs in summary
        :param name: name of script for header e.g. '__name__'
        :param value_width: width for values column in table
        :param print_to: Where to direct output. Default: stderr
        """
        print_to = sys.stderr if print_to is None else print_to

        # Get widths for formatting
        max_name_width = max(map(len, self.keys()), default=10)
        width = value_width + max_name_width + 1

        # Header
        print("="*width, file=print_to)
        print(f"STATS SUMMARY - {name}", file=print_to)
        print("-"*width, file=print_to)

        # Print stats in columns
        for key, value in self.items():
            value_str = str(value)
            if type(value) is int:
                value_str = f"{value:>{value_width},}"
            elif type(value) is float:
                value_str = f"{value:>{value_width + 4},.3f}"

            print(f"{key:<{max_name_width}} {value_str}", file=print_to)
        print("="*width, file=print_to)


def tqdm(*args, **kwargs):
    """Progress bar on stderr, hidden when stderr is not a terminal."""
    kwargs.setdefault("file", sys.stderr)
    kwargs.setdefault("disable", None)
    kwargs.setdefault("leave", False)
    return _tqdm(*args, **kwargs)
