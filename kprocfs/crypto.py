"""Parsing of the registered cryptographic implementations in /proc/crypto."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Union

from kprocfs.core import InternalError, Source, expect, parse_int, read_file, split_lines

_MISSING = object()


def _error(reason: str) -> InternalError:
    return InternalError(f"Internal Unwrap Error: {reason}")


class _Peekable:
    """An iterator over lines that can look one line ahead."""

    def __init__(self, iterable: Iterable[str]):
        self._it = iter(iterable)
        self._peeked: object = _MISSING

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._peeked is not _MISSING:
            value, self._peeked = self._peeked, _MISSING
            return value  # type: ignore[return-value]
        return next(self._it)

    def peek(self) -> str | None:
        if self._peeked is _MISSING:
            self._peeked = next(self._it, _MISSING)
        return None if self._peeked is _MISSING else self._peeked  # type: ignore[return-value]


def _peekable(lines: Iterable[str]) -> _Peekable:
    return lines if isinstance(lines, _Peekable) else _Peekable(lines)


def parse_line(lines: Iterable[str] | Iterator[str], to_find: str, name: str) -> str:
    """Take the next line, check its key is to_find and return its trimmed value."""
    line = expect(next(iter(lines), None))
    key, sep, value = line.partition(":")
    if not sep:
        raise _error("NoneError")
    if key.strip() != to_find:
        raise _error(f"could not locate {to_find} in /proc/crypto, block {name}")
    return value.strip()


def _parse_size(lines: Iterator[str], to_find: str, name: str) -> int:
    return parse_int(parse_line(lines, to_find, name))


def _parse_bool(lines: Iterator[str], to_find: str, name: str) -> bool:
    value = parse_line(lines, to_find, name)
    if value == "yes":
        return True
    if value == "no":
        return False
    raise _error(f"{to_find} for {name} was unrecognised term")


def _parse_fips(lines: _Peekable, name: str) -> bool:
    upcoming = lines.peek()
    if upcoming is not None and "fips" in upcoming:
        return parse_line(lines, "fips", name) == "yes"
    return False


def _parse_gen_iv(lines: _Peekable, name: str) -> int | None:
    upcoming = lines.peek()
    if upcoming is not None and "geniv" in upcoming:
        value = parse_line(lines, "geniv", name)
        if value != "<none>":
            return parse_int(value)
    return None


class SelfTest(enum.Enum):
    """Result of the kernel's self test of an implementation."""

    PASSED = "passed"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, text: str) -> "SelfTest":
        try:
            return cls(text)
        except ValueError:
            raise _error(f"Could not recognise self test string {text}") from None


class SimpleType(enum.Enum):
    """Implementation types that carry no further data."""

    SCOMP = "scomp"
    COMPRESSION = "compression"
    AKCIPHER = "akcipher"
    KPP = "kpp"
    SIG = "sig"


@dataclass(frozen=True)
class Skcipher:
    """Symmetric key cipher."""

    async_capable: bool
    block_size: int
    min_key_size: int
    max_key_size: int
    iv_size: int
    chunk_size: int
    walk_size: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Skcipher":
        return cls(
            async_capable=_parse_bool(lines, "async", name),
            block_size=_parse_size(lines, "blocksize", name),
            min_key_size=_parse_size(lines, "min keysize", name),
            max_key_size=_parse_size(lines, "max keysize", name),
            iv_size=_parse_size(lines, "ivsize", name),
            chunk_size=_parse_size(lines, "chunksize", name),
            walk_size=_parse_size(lines, "walksize", name),
        )


@dataclass(frozen=True)
class Cipher:
    """Single block cipher."""

    block_size: int
    min_key_size: int
    max_key_size: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Cipher":
        return cls(
            block_size=_parse_size(lines, "blocksize", name),
            min_key_size=_parse_size(lines, "min keysize", name),
            max_key_size=_parse_size(lines, "max keysize", name),
        )


@dataclass(frozen=True)
class Shash:
    """Synchronous hash."""

    block_size: int
    digest_size: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Shash":
        return cls(
            block_size=_parse_size(lines, "blocksize", name),
            digest_size=_parse_size(lines, "digestsize", name),
        )


@dataclass(frozen=True)
class Ahash:
    """Asynchronous hash."""

    async_capable: bool
    block_size: int
    digest_size: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Ahash":
        return cls(
            async_capable=_parse_bool(lines, "async", name),
            block_size=_parse_size(lines, "blocksize", name),
            digest_size=_parse_size(lines, "digestsize", name),
        )


@dataclass(frozen=True)
class Aead:
    """Authenticated encryption with associated data."""

    async_capable: bool
    block_size: int
    iv_size: int
    max_auth_size: int
    gen_iv: int | None

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Aead":
        return cls(
            async_capable=_parse_bool(lines, "async", name),
            block_size=_parse_size(lines, "blocksize", name),
            iv_size=_parse_size(lines, "ivsize", name),
            max_auth_size=_parse_size(lines, "maxauthsize", name),
            gen_iv=_parse_gen_iv(lines, name),
        )


@dataclass(frozen=True)
class Rng:
    """Random number generator."""

    seed_size: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Rng":
        return cls(seed_size=_parse_size(lines, "seedsize", name))


@dataclass(frozen=True)
class Larval:
    """Test algorithm."""

    flags: int

    @classmethod
    def _parse(cls, lines: _Peekable, name: str) -> "Larval":
        return cls(flags=parse_int(parse_line(lines, "flags", name), bits=32))


@dataclass(frozen=True)
class Unknown:
    """Unrecognised type; its remaining fields, plus "name" set to the type name."""

    fields: dict[str, str] = field(default_factory=dict)

    @classmethod
    def _parse(cls, lines: _Peekable, type_name: str) -> "Unknown":
        fields: dict[str, str] = {}
        for line in lines:
            if not line:
                break
            key, sep, value = line.partition(":")
            if sep:
                fields[key.strip()] = value.strip()
        fields["name"] = type_name
        return cls(fields)


CryptoType = Union[Skcipher, Cipher, Shash, Ahash, Aead, Rng, Larval, SimpleType, Unknown]

_TYPES = {
    "skcipher": Skcipher,
    "cipher": Cipher,
    "shash": Shash,
    "ahash": Ahash,
    "aead": Aead,
    "rng": Rng,
    "larval": Larval,
}


def _parse_type(lines: _Peekable, name: str) -> CryptoType:
    type_name = parse_line(lines, "type", name)
    parser = _TYPES.get(type_name)
    if parser is not None:
        return parser._parse(lines, name)
    try:
        return SimpleType(type_name)
    except ValueError:
        return Unknown._parse(lines, type_name)


@dataclass(frozen=True)
class CryptoBlock:
    """One cryptographic implementation registered with the kernel."""

    name: str
    driver: str
    module: str
    priority: int
    ref_count: int
    self_test: SelfTest
    internal: bool
    fips_enabled: bool
    crypto_type: CryptoType

    @classmethod
    def from_lines(cls, lines: Iterable[str], name: str) -> "CryptoBlock":
        """Parse the lines of a block that follow its "name" line."""
        lines = _peekable(lines)
        driver = parse_line(lines, "driver", name)
        module = parse_line(lines, "module", name)
        priority = parse_int(parse_line(lines, "priority", name), signed=True)
        ref_count = parse_int(parse_line(lines, "refcnt", name), signed=True)
        self_test = SelfTest.from_str(parse_line(lines, "selftest", name))
        internal = _parse_bool(lines, "internal", name)
        fips_enabled = _parse_fips(lines, name)
        crypto_type = _parse_type(lines, name)
        return cls(
            name=name,
            driver=driver,
            module=module,
            priority=priority,
            ref_count=ref_count,
            self_test=self_test,
            internal=internal,
            fips_enabled=fips_enabled,
            crypto_type=crypto_type,
        )


@dataclass
class CryptoTable:
    """All implementations from /proc/crypto, grouped by algorithm name."""

    crypto_blocks: dict[str, list[CryptoBlock]] = field(default_factory=dict)

    @classmethod
    def parse(cls, source: Source) -> "CryptoTable":
        lines = _Peekable(split_lines(source))
        blocks: dict[str, list[CryptoBlock]] = {}
        for line in lines:
            if not line:
                continue
            parts = line.split(":")
            if parts[0].strip() != "name":
                continue
            name = expect(parts[1] if len(parts) > 1 else None).strip()
            blocks.setdefault(name, []).append(CryptoBlock.from_lines(lines, name))
        return cls(blocks)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "CryptoTable":
        return read_file(path, cls.parse)

    def get(self, target: str) -> list[CryptoBlock] | None:
        """Implementations registered under the given algorithm name."""
        return self.crypto_blocks.get(target)