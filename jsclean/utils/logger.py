"""Terminal-safe text for console output.

Detects whether the terminal can take UTF-8 and provides ASCII
stand-ins for the handful of icons the CLI prints, so reports never
crash a cp1252 Windows console.
"""
import locale
import sys

# Unicode icon -> ASCII replacement
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '…': '...',
    '•': '*',
    '🧹': '[clean]',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable(encoding: str | None = None) -> bool:
    """Check if the terminal (or the given encoding) handles UTF-8."""
    encoding = (encoding or detect_terminal_encoding()).lower().replace('_', '-')
    return encoding in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str, utf8: bool | None = None) -> str:
    """Replace known icons with ASCII equivalents on non-UTF-8 terminals.

    Args:
        text: Text potentially containing icons
        utf8: Force the capability check result (mainly for tests)

    Returns:
        str: Text safe for the current terminal
    """
    if utf8 is None:
        utf8 = is_utf8_capable()
    if utf8:
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text
