from collections import namedtuple


# Half-open byte range [start, end) into the source bytes.
Span = namedtuple("Span", ["start", "end"])


class SourceText:
    """
    Read-only view over the bytes of one source file.

    Spans are byte offsets (tree-sitter reports bytes), so every slice is
    taken on the raw bytes and decoded afterwards.
    """

    def __init__(self, data, filename=None):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.data = data
        self.filename = filename

    def raw(self, span):
        return self.data[span.start:span.end]

    def text(self, span):
        return self.raw(span).decode("utf-8", errors="replace")

    def line_col(self, offset):
        line = self.data.count(b"\n", 0, offset) + 1
        line_start = self.data.rfind(b"\n", 0, offset) + 1
        column = len(self.data[line_start:offset].decode("utf-8", errors="replace")) + 1
        return line, column

    def line_text(self, line):
        lines = self.data.split(b"\n")
        if line < 1 or line > len(lines):
            return ""
        return lines[line - 1].decode("utf-8", errors="replace").rstrip("\r")
