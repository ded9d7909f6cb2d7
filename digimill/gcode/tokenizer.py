"""Line tokenizer for G-code.

Splits a single source line into words, comments, line numbers and
unknown characters. Malformed input never raises; anything that is not
recognised comes back as an ``UNKNOWN`` token so the parser can report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_BLANKS = " \t"
_DIGITS = "0123456789"


class TokenKind(Enum):
    WORD = "word"
    COMMENT = "comment"
    LINE_NUMBER = "lineNumber"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Token:
    """A lexical token of one G-code line."""

    kind: TokenKind
    text: str  # word: letter + number, comment: body, line number: digits
    raw: str  # exact source slice
    column: int  # 0-based offset into the original line


def _is_letter(ch: str) -> bool:
    return ("A" <= ch <= "Z") or ("a" <= ch <= "z")


def _read_digits(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] in _DIGITS:
        pos += 1
    return pos


def read_word(line: str, start: int, column_offset: int = 0) -> Token | None:
    """Read a ``<letter><number>`` word beginning at *start*.

    Whitespace between the letter and the number is allowed. Returns
    ``None`` when no digit follows the letter.
    """
    if start >= len(line) or not _is_letter(line[start]):
        return None

    letter = line[start].upper()
    pos = start + 1
    while pos < len(line) and line[pos] in _BLANKS:
        pos += 1

    num_start = pos
    if pos < len(line) and line[pos] in "+-":
        pos += 1

    digits_end = _read_digits(line, pos)
    has_digit = digits_end > pos
    pos = digits_end

    if pos < len(line) and line[pos] == ".":
        frac_end = _read_digits(line, pos + 1)
        has_digit = has_digit or frac_end > pos + 1
        pos = frac_end

    if not has_digit:
        return None

    return Token(
        kind=TokenKind.WORD,
        text=letter + line[num_start:pos],
        raw=line[start:pos],
        column=start + column_offset,
    )


def tokenize_line(line: str, column_offset: int = 0) -> list[Token]:
    """Tokenize a single line of G-code.

    Parameters
    ----------
    line:
        The line text, without its line terminator.
    column_offset:
        Added to every reported column. The parser uses it when it
        tokenizes a left-stripped line so that columns still refer to
        the original line.

    Returns
    -------
    Ordered list of tokens.
    """
    tokens: list[Token] = []
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]

        if ch in _BLANKS:
            i += 1
            continue

        # Block delete
        if ch == "/" and i == 0:
            tokens.append(Token(TokenKind.UNKNOWN, "/", "/", i + column_offset))
            i += 1
            continue

        # Semicolon comment runs to end of line
        if ch == ";":
            tokens.append(
                Token(TokenKind.COMMENT, line[i + 1:].strip(), line[i:], i + column_offset)
            )
            break

        if ch == "(":
            end = line.find(")", i)
            if end == -1:
                # Unclosed parenthesis swallows the rest of the line
                tokens.append(
                    Token(TokenKind.COMMENT, line[i + 1:].strip(), line[i:], i + column_offset)
                )
                break
            tokens.append(
                Token(
                    TokenKind.COMMENT,
                    line[i + 1:end].strip(),
                    line[i:end + 1],
                    i + column_offset,
                )
            )
            i = end + 1
            continue

        # Program delimiter
        if ch == "%":
            tokens.append(Token(TokenKind.UNKNOWN, "%", "%", i + column_offset))
            i += 1
            continue

        if ch in "Nn":
            digits_end = _read_digits(line, i + 1)
            if digits_end > i + 1:
                tokens.append(
                    Token(
                        TokenKind.LINE_NUMBER,
                        line[i + 1:digits_end],
                        line[i:digits_end],
                        i + column_offset,
                    )
                )
                i = digits_end
                continue
            # N without digits: fall through and try it as a word

        if _is_letter(ch):
            word = read_word(line, i, column_offset)
            if word is not None:
                tokens.append(word)
                i += len(word.raw)
                continue

        tokens.append(Token(TokenKind.UNKNOWN, ch, ch, i + column_offset))
        i += 1

    return tokens
