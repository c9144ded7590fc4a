import os
import sys


# ANSI color codes
class Colors:
    RED = '\033[91m'
    RESET = '\033[0m'


def supports_color(stream=None):
    """Check if the given stream (stdout by default) should get ANSI colors."""
    stream = stream if stream is not None else sys.stdout

    # https://no-color.org
    if 'NO_COLOR' in os.environ:
        return False

    isatty = getattr(stream, 'isatty', None)
    if isatty is None or not isatty():
        return False

    if os.name == 'nt':
        return 'WT_SESSION' in os.environ or os.environ.get('TERM_PROGRAM') == 'vscode'

    return os.environ.get('TERM') != 'dumb'


def colored(text, color, stream=None):
    """Wrap text in the color code when the stream supports it."""
    if supports_color(stream):
        return f"{color}{text}{Colors.RESET}"
    return text
