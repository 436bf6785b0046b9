import sys
from typing import Iterable, List, Optional, TextIO


class IOChannel:
    """Supplies input lines to ΔΙΑΒΑΣΕ and collects the lines of ΓΡΑΨΕ.

    Every emitted line is kept in `output`, in order, whatever else the
    channel does with it.
    """
    def __init__(self):
        self.output: List[str] = []

    def emit(self, line: str):
        self.output.append(line)
        self.write(line)

    def write(self, line: str):
        pass

    def next_input_line(self) -> Optional[str]:
        """Return the next input line, or None once input is exhausted."""
        raise NotImplementedError


class BufferedIO(IOChannel):
    """Serves a fixed list of input lines and only buffers output."""
    def __init__(self, inputs: Optional[Iterable[str]] = None):
        super().__init__()
        self.inputs: List[str] = list(inputs) if inputs is not None else []
        self.position = 0

    def next_input_line(self) -> Optional[str]:
        if self.position >= len(self.inputs):
            return None
        line = self.inputs[self.position]
        self.position += 1
        return line


class ConsoleIO(IOChannel):
    """Prints output lines and reads input from given lines or from stdin."""
    def __init__(self, input_lines: Optional[Iterable[str]] = None,
                 stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        super().__init__()
        self.input_lines = list(input_lines) if input_lines is not None else None
        self.stdin = stdin
        self.stdout = stdout

    def write(self, line: str):
        print(line, file=self.stdout or sys.stdout)

    def next_input_line(self) -> Optional[str]:
        if self.input_lines is not None:
            if not self.input_lines:
                return None
            return self.input_lines.pop(0)
        line = (self.stdin or sys.stdin).readline()
        if line == '':
            return None
        return line.rstrip('\n')
