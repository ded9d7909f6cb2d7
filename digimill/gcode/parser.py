"""G-code parser.

Turns raw G-code text into structured Instruction objects, one per source
line (more when a line carries several G/M words), plus lexical errors.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from digimill.gcode.tokenizer import Token, TokenKind, tokenize_line

logger = logging.getLogger(__name__)


class MotionType(Enum):
    RAPID = "rapid"
    LINEAR = "linear"
    CW_ARC = "cwArc"
    CCW_ARC = "ccwArc"

    @property
    def is_arc(self) -> bool:
        return self in (MotionType.CW_ARC, MotionType.CCW_ARC)


MOTION_COMMANDS: dict[str, MotionType] = {
    "G0": MotionType.RAPID,
    "G1": MotionType.LINEAR,
    "G2": MotionType.CW_ARC,
    "G3": MotionType.CCW_ARC,
}

_COMMAND_LETTERS = ("G", "M")


@dataclass(frozen=True)
class Word:
    """A letter/value pair such as ``X10.5``."""

    letter: str
    value: float
    raw: str


@dataclass
class Instruction:
    """One unit of execution derived from a source line."""

    source_line: int  # 1-based
    command: Word | None = None
    parameters: list[Word] = field(default_factory=list)
    comment: str | None = None
    raw: str = ""
    block_delete: bool = False

    # Resolved once from ``command``
    command_string: str | None = field(init=False, default=None)
    motion_type: MotionType | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.command_string = _format_command(self.command)
        self.motion_type = MOTION_COMMANDS.get(self.command_string or "")

    @property
    def is_empty(self) -> bool:
        return self.command is None and not self.parameters

    def has_param(self, letter: str) -> bool:
        return get_param(self, letter) is not None


@dataclass(frozen=True)
class ParseError:
    line: int
    column: int
    message: str
    end_column: int = -1

    def __post_init__(self) -> None:
        if self.end_column < self.column:
            object.__setattr__(self, "end_column", self.column + 1)


@dataclass
class ParseResult:
    instructions: list[Instruction]
    errors: list[ParseError]
    line_count: int


# ----------------------------------------------------------------------
# Accessors
# ----------------------------------------------------------------------


def get_param(instruction: Instruction, letter: str) -> float | None:
    """Return the value of the *last* parameter with *letter*, or None."""
    letter = letter.upper()
    for word in reversed(instruction.parameters):
        if word.letter == letter:
            return word.value
    return None


def get_command_string(instruction: Instruction) -> str | None:
    """Return the command as ``"G0"`` .. ``"M999"``.

    The value is truncated to an integer, so ``G59.1`` reads as ``G59``.
    """
    return instruction.command_string


def _format_command(command: Word | None) -> str | None:
    if command is None:
        return None
    return f"{command.letter}{math.floor(command.value)}"


def format_number(value: float) -> str:
    """Render *value* without a trailing ``.0`` for integral numbers."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


class GCodeParser:
    """Stateless parser that converts G-code text into Instructions."""

    def parse_line(
        self, line: str, line_number: int = 1
    ) -> tuple[list[Instruction], list[ParseError]]:
        """Parse a single source line.

        Parameters
        ----------
        line:
            Raw line text without its terminator.
        line_number:
            1-based source line number stamped on every instruction.

        Returns
        -------
        The instructions produced by the line (always at least one) and any
        lexical errors found on it.
        """
        stripped = line.strip()
        if stripped == "" or stripped == "%":
            return [Instruction(source_line=line_number, raw=line)], []

        # Tokenize without leading blanks so a '/' after indentation still
        # counts as block delete; columns keep referring to ``line``.
        offset = len(line) - len(line.lstrip())
        tokens = tokenize_line(stripped, column_offset=offset)

        instructions: list[Instruction] = []
        errors: list[ParseError] = []
        block_delete = False
        command: Word | None = None
        parameters: list[Word] = []
        comment: str | None = None

        for token in tokens:
            if token.kind is TokenKind.UNKNOWN and token.text == "/":
                block_delete = True
                continue
            if token.kind is TokenKind.UNKNOWN and token.text == "%":
                continue
            if token.kind is TokenKind.COMMENT:
                comment = token.text
                continue
            if token.kind is TokenKind.LINE_NUMBER:
                continue

            if token.kind is TokenKind.WORD:
                word = self._make_word(token)
                if word is None:
                    errors.append(
                        ParseError(
                            line=line_number,
                            column=token.column,
                            message=f"Invalid number in word: {token.raw}",
                            end_column=token.column + len(token.raw),
                        )
                    )
                    continue

                if word.letter in _COMMAND_LETTERS:
                    if command is not None:
                        # Another command on the same line closes the current one
                        instructions.append(
                            Instruction(
                                source_line=line_number,
                                command=command,
                                parameters=parameters,
                                raw=line,
                                block_delete=block_delete,
                            )
                        )
                        parameters = []
                    command = word
                else:
                    parameters.append(word)
                continue

            errors.append(
                ParseError(
                    line=line_number,
                    column=token.column,
                    message=f"Unexpected character: '{token.text}'",
                    end_column=token.column + len(token.raw),
                )
            )

        instructions.append(
            Instruction(
                source_line=line_number,
                command=command,
                parameters=parameters,
                comment=comment,
                raw=line,
                block_delete=block_delete,
            )
        )
        return instructions, errors

    def parse_file(self, gcode_text: str) -> ParseResult:
        """Parse a complete G-code program.

        Lines are split on ``\\n``; a trailing ``\\r`` is dropped so CRLF
        text keeps the same line numbering.
        """
        lines = gcode_text.split("\n")
        instructions: list[Instruction] = []
        errors: list[ParseError] = []

        for idx, line in enumerate(lines, start=1):
            if line.endswith("\r"):
                line = line[:-1]
            line_instructions, line_errors = self.parse_line(line, idx)
            instructions.extend(line_instructions)
            errors.extend(line_errors)

        logger.debug(
            "Parsed %d lines into %d instructions (%d errors)",
            len(lines), len(instructions), len(errors),
        )
        return ParseResult(instructions=instructions, errors=errors, line_count=len(lines))

    @staticmethod
    def _make_word(token: Token) -> Word | None:
        try:
            value = float(token.text[1:])
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        return Word(letter=token.text[0].upper(), value=value, raw=token.raw)


def parse(text: str) -> ParseResult:
    """Parse *text* with a fresh :class:`GCodeParser`."""
    return GCodeParser().parse_file(text)
