"""Tabular text output of query results."""

from __future__ import annotations


class ResultWriter:
    """Writes bordered table rows and summary lines to a text stream."""

    def __init__(self, stream, disable_header=False, separator="|"):
        self.stream = stream
        self.disable_header = disable_header
        self.separator = separator

    def write_cell(self, cell, width):
        self.stream.write(f" {str(cell).ljust(width)} {self.separator}")

    def write_header_cell(self, cell, width):
        if not self.disable_header:
            self.write_cell(cell, width)

    def divider(self, widths):
        self.stream.write("+" + "".join("+".rjust(width + 3, "-") for width in widths) + "\n")

    def begin_row(self):
        self.stream.write("|")

    def end_row(self):
        self.stream.write("\n")
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def end_information(self, result_size, time_ms, is_scan):
        """Write the summary line; time_ms is in milliseconds."""
        if is_scan:
            text = f"{result_size} row in set" if result_size else "Empty set"
        else:
            text = f"Query OK, {result_size} row affected"
        self.stream.write(f"{text}({time_ms / 1000:.4f} sec).\n")
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()