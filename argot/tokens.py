"""
Argot tokenizer.

Purpose
- Split a raw command line into positioned tokens, honoring double quotes and
  backslash escapes, in a single left-to-right pass.

Rules
- A backslash makes the next character literal; the backslash itself is
  dropped (a trailing lone backslash is dropped too).
- An unescaped double quote closes the open token, then toggles quoted mode.
  Quotes never appear in token text.
- Outside quoted mode, whitespace closes the open token and is skipped.
- Quoted tokens have their span widened by one character on each side so that
  diagnostics bracket the quotes as well.
- End of input closes the open token; an unterminated quote is accepted.

Offsets
- Token.start/Token.end always refer to the untouched source string, even when
  quotes or escapes removed characters from Token.text.
"""
from collections import namedtuple


class Token(namedtuple("Token", ("text", "start", "end", "quoted"))):
    """
    A positioned, possibly quoted, substring of a command line.

    Fields
    - text: token text with quotes and escapes removed (never empty, except
      for the end-of-input marker built by terminal()).
    - start / end: half-open span in the original source.
    - quoted: whether the token came from a quoted run.
    """
    __slots__ = ()

    @property
    def span(self):
        return self.start, self.end


def terminal(source, /):
    """
    Build the end-of-input marker token for diagnostics about missing input.
    """
    return Token("", len(source), len(source), False)


def tokenize(source, start=0, /):
    """
    Split source into a list of tokens, starting the scan at offset start.

    The function is pure: the same arguments always produce an equal list.
    """
    if not isinstance(source, str):
        raise TypeError("tokenize() source must be a string")
    if not isinstance(start, int) or isinstance(start, bool) or start < 0:
        raise TypeError("tokenize() start must be a non-negative integer")

    tokens = []
    text = None
    begin = 0
    escaped = False
    quoted = False

    def flush(index):
        nonlocal text
        if text:
            if quoted:
                tokens.append(Token("".join(text), begin - 1, min(index + 1, len(source)), True))
            else:
                tokens.append(Token("".join(text), begin, index, False))
        text = None

    for index in range(start, len(source)):
        if text is None:
            text, begin = [], index

        match char := source[index]:
            case _ if escaped:
                escaped = False
                text.append(char)
            case "\\":
                escaped = True
            case '"':
                flush(index)
                quoted = not quoted
            case _ if not quoted and char.isspace():
                flush(index)
            case _:
                text.append(char)

    flush(len(source))
    return tokens


__all__ = (
    "Token",
    "terminal",
    "tokenize",
)
