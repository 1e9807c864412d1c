"""
Command-line escaping for arguments handed to Prince without a shell.

Two separate tools for two kinds of call sites:
    escape_argument: values embedded inside a pair of double quotes
                     (credentials, PDF metadata, paths given as option values).
    add_double_quotes: path-like bare tokens (the executable path), where only
                       the delimiter-significant characters get quoted.

The rules follow the Microsoft C runtime argument parser, which is what
Prince uses to split a command line when no shell is involved:
    - 2n backslashes followed by a quote -> n backslashes, quote toggles quoting
    - 2n+1 backslashes followed by a quote -> n backslashes and a literal quote
    - backslashes not followed by a quote are literal
"""

BACKSLASH = "\\"
DOUBLE_QUOTE = '"'

# Characters that split or otherwise change meaning in a bare token
WEIRD_CHARACTERS = frozenset(" ;,&^()")


def escape_quotes(arg: str) -> str:
    """
    Escape every double quote together with the backslashes preceding it.

    A run of n backslashes followed by a quote becomes 2n+1 backslashes and
    the quote, so the quote survives as literal content.

    Examples:
        >>> escape_quotes('a"b')
        'a\\\\"b'
        >>> escape_quotes('no quotes here')
        'no quotes here'
    """
    output = []
    start = 0

    for i, char in enumerate(arg):
        if char != DOUBLE_QUOTE:
            continue

        # Count the backslash run immediately before the quote
        num_slashes = 0
        j = i - 1
        while j >= start and arg[j] == BACKSLASH:
            num_slashes += 1
            j -= 1

        output.append(arg[start : i - num_slashes])
        output.append(BACKSLASH * (2 * num_slashes + 1) + DOUBLE_QUOTE)
        start = i + 1

    output.append(arg[start:])
    return "".join(output)


def double_trailing_backslashes(arg: str) -> str:
    """Double the trailing backslash run so a closing quote is not escaped."""
    num_trailing = len(arg) - len(arg.rstrip(BACKSLASH))
    return arg + BACKSLASH * num_trailing


def escape_argument(arg: str) -> str:
    """
    Make a string safe to place between a pair of double quotes.

    Applies escape_quotes, then double_trailing_backslashes. Unquoting the
    result with the C runtime rules gives back the original string.

    Args:
        arg: Raw value (password, title, path, ...)

    Returns:
        Escaped value, without the surrounding quotes

    Examples:
        >>> escape_argument('C:\\\\path\\\\')
        'C:\\\\path\\\\\\\\'
    """
    return double_trailing_backslashes(escape_quotes(arg))


def add_double_quotes(token: str) -> str:
    """
    Quote each run of weird characters in a bare token.

    Runs of characters from WEIRD_CHARACTERS are wrapped in double quotes,
    everything else is copied verbatim. Adjacent weird characters share one
    quoted run.

    Examples:
        >>> add_double_quotes("C:\\\\Program Files\\\\app.exe")
        'C:\\\\Program" "Files\\\\app.exe'
        >>> add_double_quotes("/usr/local/bin/prince")
        '/usr/local/bin/prince'
    """
    output = []
    run = []
    run_is_weird = False

    for char in token:
        is_weird = char in WEIRD_CHARACTERS
        if run and is_weird != run_is_weird:
            output.append(_flush_run(run, run_is_weird))
            run = []
        run.append(char)
        run_is_weird = is_weird

    if run:
        output.append(_flush_run(run, run_is_weird))

    return "".join(output)


def _flush_run(run: list, weird: bool) -> str:
    text = "".join(run)
    return f"{DOUBLE_QUOTE}{text}{DOUBLE_QUOTE}" if weird else text


def unescape_argument(quoted: str) -> str:
    """
    Parse one double-quoted argument with the C runtime rules.

    Inverse of wrapping escape_argument() output in quotes. Used to check
    escaping round-trips and to display command lines.

    Args:
        quoted: Argument text including the surrounding quotes

    Returns:
        The literal argument value

    Raises:
        ValueError: If the text is not a single well-formed quoted argument
    """
    if len(quoted) < 2 or not (quoted.startswith(DOUBLE_QUOTE) and quoted.endswith(DOUBLE_QUOTE)):
        raise ValueError(f"Not a quoted argument: {quoted!r}")

    body = quoted[1:]
    output = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == BACKSLASH:
            num_slashes = 0
            while i < len(body) and body[i] == BACKSLASH:
                num_slashes += 1
                i += 1
            if i < len(body) and body[i] == DOUBLE_QUOTE:
                output.append(BACKSLASH * (num_slashes // 2))
                if num_slashes % 2:
                    output.append(DOUBLE_QUOTE)
                    i += 1
                # Even run: the quote is handled as a delimiter on the next pass
            else:
                output.append(BACKSLASH * num_slashes)
        elif char == DOUBLE_QUOTE:
            if i != len(body) - 1:
                raise ValueError(f"Unescaped quote inside argument: {quoted!r}")
            return "".join(output)
        else:
            output.append(char)
            i += 1

    raise ValueError(f"Unterminated quoted argument: {quoted!r}")
