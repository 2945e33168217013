import os
import sys
from enum import IntEnum
from typing import List, Optional, TextIO, Tuple

from hexcalc.errors import EvalError, ErrorKind


class IOCode(IntEnum):
    NONE = 0
    NOT_INSERTED = -1
    MOUNT_FAIL = -2
    NOT_EXISTS = -3
    WRITE_FAIL = -4
    READ_FAIL = -5
    LONG_NAME = -6
    MKDIR_ERR = -7
    NOT_IMPLEMENTED = -8


IO_MESSAGES = {
    IOCode.NOT_INSERTED: 'storage not inserted',
    IOCode.MOUNT_FAIL: 'storage mount failure',
    IOCode.NOT_EXISTS: 'file does not exist',
    IOCode.WRITE_FAIL: 'write failure',
    IOCode.READ_FAIL: 'read failure',
    IOCode.LONG_NAME: 'file name too long',
    IOCode.MKDIR_ERR: 'make directory error',
    IOCode.NOT_IMPLEMENTED: 'not implemented',
}

MAX_FILE_NAME = 64


def io_failure(code: int, action: str) -> EvalError:
    try:
        message = IO_MESSAGES[IOCode(code)]
    except ValueError:
        message = f'unknown error {code}'
    return EvalError(ErrorKind.IO_FAILURE, f'{action}: {message}', code)


def check(code: int, action: str) -> int:
    """Raise an IOFailure for a negative service code, pass others through."""
    if code < 0:
        raise io_failure(code, action)
    return code


class System:
    """Services a host lends to the calculator.

    Every service defaults to NOT_IMPLEMENTED, which is how a host marks a
    service as unavailable. Only one resource is open at a time; `read`
    and `write` act on it.
    """

    def emit(self, text: str) -> int:
        return IOCode.NOT_IMPLEMENTED

    def clear(self) -> int:
        return IOCode.NOT_IMPLEMENTED

    def list_files(self) -> Tuple[int, List[str]]:
        return IOCode.NOT_IMPLEMENTED, []

    def open(self, name: str, mode: str) -> int:
        return IOCode.NOT_IMPLEMENTED

    def close(self) -> int:
        return IOCode.NOT_IMPLEMENTED

    def read(self, size: int) -> Tuple[int, bytes]:
        """Read up to `size` bytes; a zero count means end of file."""
        return IOCode.NOT_IMPLEMENTED, b''

    def write(self, data: bytes) -> int:
        """Write `data`, returning the number of bytes written."""
        return IOCode.NOT_IMPLEMENTED


class FileSystem(System):
    """System services backed by a directory and a text stream.

    Saved environments live in `<root>/<name>.json`.
    """
    def __init__(self, root: str, stream: Optional[TextIO] = None):
        self.root = root
        self.stream = stream
        self.file = None

    def out(self) -> TextIO:
        return self.stream or sys.stdout

    def emit(self, text: str) -> int:
        self.out().write(text)
        self.out().flush()
        return IOCode.NONE

    def clear(self) -> int:
        self.out().write('\x1b[2J\x1b[H')
        self.out().flush()
        return IOCode.NONE

    def ensure_root(self) -> int:
        if os.path.isdir(self.root):
            return IOCode.NONE
        try:
            os.makedirs(self.root)
        except OSError:
            return IOCode.MKDIR_ERR
        return IOCode.NONE

    def list_files(self) -> Tuple[int, List[str]]:
        code = self.ensure_root()
        if code < 0:
            return code, []
        names = sorted(
            entry[:-len('.json')] for entry in os.listdir(self.root)
            if entry.endswith('.json')
        )
        return IOCode.NONE, names

    def open(self, name: str, mode: str) -> int:
        if len(name) > MAX_FILE_NAME:
            return IOCode.LONG_NAME
        code = self.ensure_root()
        if code < 0:
            return code
        if self.file is not None:
            self.close()
        path = os.path.join(self.root, name + '.json')
        try:
            self.file = open(path, mode + 'b')
        except OSError:
            return IOCode.WRITE_FAIL if mode == 'w' else IOCode.NOT_EXISTS
        return IOCode.NONE

    def close(self) -> int:
        if self.file is None:
            return IOCode.NONE
        self.file.close()
        self.file = None
        return IOCode.NONE

    def read(self, size: int) -> Tuple[int, bytes]:
        if self.file is None:
            return IOCode.READ_FAIL, b''
        try:
            data = self.file.read(size)
        except OSError:
            return IOCode.READ_FAIL, b''
        return len(data), data

    def write(self, data: bytes) -> int:
        if self.file is None:
            return IOCode.WRITE_FAIL
        try:
            self.file.write(data)
        except OSError:
            return IOCode.WRITE_FAIL
        return len(data)
