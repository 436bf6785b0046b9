from .basic_io import IOChannel, BufferedIO, ConsoleIO

__all__ = [
    'IOChannel',
    'BufferedIO',
    'ConsoleIO',
]
