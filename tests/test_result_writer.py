import io

import pytest

from minidb.result_writer import ResultWriter


def _writer(**kwargs):
    stream = io.StringIO()
    return stream, ResultWriter(stream, **kwargs)


@pytest.mark.parametrize("cell, width", [("id", 5), ("name", 4), ("x", 1)])
def test_write_cell_pads_to_width(cell, width):
    stream, writer = _writer()
    writer.write_cell(cell, width)
    out = stream.getvalue()
    assert len(out) == width + 3
    assert out.startswith(" " + cell)
    assert out.endswith(" |")
    assert out[1:-2].rstrip() == cell


def test_write_cell_longer_than_width_is_not_cut():
    stream, writer = _writer()
    writer.write_cell("abcdef", 2)
    assert stream.getvalue() == " abcdef |"


def test_custom_separator():
    stream, writer = _writer(separator=",")
    writer.write_cell("a", 1)
    assert stream.getvalue().endswith(" ,")


def test_header_cell_respects_disable_header():
    stream, writer = _writer()
    writer.write_header_cell("id", 4)
    plain_stream, plain = _writer()
    plain.write_cell("id", 4)
    assert stream.getvalue() == plain_stream.getvalue()

    hidden_stream, hidden = _writer(disable_header=True)
    hidden.write_header_cell("id", 4)
    assert hidden_stream.getvalue() == ""


def test_divider_shape():
    stream, writer = _writer()
    widths = [2, 5]
    writer.divider(widths)
    out = stream.getvalue()
    assert out.endswith("\n")
    line = out[:-1]
    assert line.count("+") == len(widths) + 1
    assert len(line) == 1 + sum(w + 3 for w in widths)
    assert set(line) == {"+", "-"}


def test_row_lines_align_with_divider():
    stream, writer = _writer()
    widths = [3, 6]
    writer.divider(widths)
    writer.begin_row()
    for cell, width in zip(["a", "bb"], widths):
        writer.write_cell(cell, width)
    writer.end_row()
    divider_line, row_line = stream.getvalue().splitlines()
    assert len(divider_line) == len(row_line)
    assert row_line.startswith("|") and row_line.endswith("|")


def test_end_information_empty_scan():
    stream, writer = _writer()
    writer.end_information(0, 1.5, True)
    assert stream.getvalue() == "Empty set(0.0015 sec).\n"


def test_end_information_scan_with_rows():
    stream, writer = _writer()
    writer.end_information(3, 0, True)
    out = stream.getvalue()
    assert out.startswith("3 row in set(")
    assert out.endswith(" sec).\n")


def test_end_information_modification():
    stream, writer = _writer()
    writer.end_information(2, 0, False)
    out = stream.getvalue()
    assert out.startswith("Query OK, 2 row affected(")
    assert out.endswith(" sec).\n")