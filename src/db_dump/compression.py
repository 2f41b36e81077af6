"""Compression stages spliced between the dump and the sink write.

Each compressor hands its stage and file suffix to a callback:

    compressor.compress_with(lambda stage, suffix: ...)

Supported formats:
- gzip: ``.gz``
- bzip2: ``.bz2``
- custom: any filter command with a caller given suffix
"""

from collections.abc import Callable
from typing import Protocol

from db_dump.config.models import CompressionSettings
from db_dump.pipeline.models import Command, Raw, Stage
from db_dump.utilities import Utilities

SpliceCallback = Callable[[Stage, str], None]


class Compressor(Protocol):
    def compress_with(self, callback: SpliceCallback) -> None:
        ...


class Gzip:
    """``gzip [-<level>] [--rsyncable]``"""

    def __init__(self, utilities: Utilities, level: int | None = None, rsyncable: bool = False) -> None:
        self.utilities = utilities
        self.level = level
        self.rsyncable = rsyncable

    def compress_with(self, callback: SpliceCallback) -> None:
        args = []
        if self.level:
            args.append(f"-{self.level}")
        if self.rsyncable:
            args.append("--rsyncable")
        command = Command(self.utilities.resolve("gzip"), tuple(args))
        callback(Stage(label="gzip", commands=(command,)), ".gz")


class Bzip2:
    """``bzip2 [-<level>]``"""

    def __init__(self, utilities: Utilities, level: int | None = None) -> None:
        self.utilities = utilities
        self.level = level

    def compress_with(self, callback: SpliceCallback) -> None:
        args = (f"-{self.level}",) if self.level else ()
        command = Command(self.utilities.resolve("bzip2"), args)
        callback(Stage(label="bzip2", commands=(command,)), ".bz2")


class CustomCompressor:
    """User supplied filter command, e.g. ``pigz -p 4`` with ``.gz``.

    The first word is resolved as a utility; the rest is passed verbatim.
    """

    def __init__(self, utilities: Utilities, command: str, extension: str) -> None:
        self.utilities = utilities
        self.command = command
        self.extension = extension if extension.startswith(".") else f".{extension}"

    def compress_with(self, callback: SpliceCallback) -> None:
        program, _, rest = self.command.strip().partition(" ")
        args = (Raw(rest.strip()),) if rest.strip() else ()
        command = Command(self.utilities.resolve(program), args)
        callback(Stage(label=program, commands=(command,)), self.extension)


def create_compressor(settings: CompressionSettings, utilities: Utilities) -> Compressor:
    """Factory function to create the compressor described by ``settings``.

    Raises:
        ValueError: If settings.type is invalid
    """
    if settings.type == "gzip":
        return Gzip(utilities, level=settings.level, rsyncable=settings.rsyncable)
    elif settings.type == "bzip2":
        return Bzip2(utilities, level=settings.level)
    elif settings.type == "custom":
        return CustomCompressor(utilities, settings.command, settings.extension)
    else:
        raise ValueError(f"Invalid compression type: {settings.type}")
