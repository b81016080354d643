"""The in-kernel key management facility: /proc/keys and /proc/key-users."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import ClassVar, Iterator

from kprocfs.core import InternalError, Source, expect, parse_int, read_file, split_lines


def _error(reason: str) -> InternalError:
    return InternalError(f"Internal Unwrap Error: {reason}")


class KeyFlags(enum.IntFlag):
    """State flags of a key."""

    INSTANTIATED = 0x01
    REVOKED = 0x02
    DEAD = 0x04
    QUOTA = 0x08
    UNDER_CONSTRUCTION = 0x10
    NEGATIVE = 0x20
    INVALID = 0x40

    @classmethod
    def from_str(cls, text: str) -> "KeyFlags":
        """Decode the positional flag string, e.g. "I--Q---"."""
        letters = (
            ("I", cls.INSTANTIATED),
            ("R", cls.REVOKED),
            ("D", cls.DEAD),
            ("Q", cls.QUOTA),
            ("U", cls.UNDER_CONSTRUCTION),
            ("N", cls.NEGATIVE),
            ("i", cls.INVALID),
        )
        flags = cls(0)
        for char, (letter, flag) in zip(text, letters):
            if char == letter:
                flags |= flag
        return flags


class PermissionFlags(enum.IntFlag):
    """Permission bits granted to one class of accessor."""

    VIEW = 0x01
    READ = 0x02
    WRITE = 0x04
    SEARCH = 0x08
    LINK = 0x10
    SETATTR = 0x20
    ALL = 0x3F


def _permission_flags(text: str, whole: str) -> PermissionFlags:
    value = parse_int(text, radix=16, bits=32)
    if value & ~int(PermissionFlags.ALL):
        raise _error(f"Unable to parse {whole!r} as PermissionFlags")
    return PermissionFlags(value)


@dataclass(frozen=True)
class Permissions:
    """Key permissions for possessor, user, group and other."""

    possessor: PermissionFlags
    user: PermissionFlags
    group: PermissionFlags
    other: PermissionFlags

    @classmethod
    def from_str(cls, text: str) -> "Permissions":
        """Decode eight hex digits, two per accessor class."""
        return cls(
            possessor=_permission_flags(text[0:2], text),
            user=_permission_flags(text[2:4], text),
            group=_permission_flags(text[4:6], text),
            other=_permission_flags(text[6:8], text),
        )


class TimeoutKind(enum.Enum):
    """How a key expires."""

    PERMANENT = "perm"
    EXPIRED = "expd"
    TIMEOUT = "timeout"


_UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 60 * 60 * 24, "w": 60 * 60 * 24 * 7}


@dataclass(frozen=True)
class KeyTimeout:
    """Expiry state of a key; duration is set only for TIMEOUT."""

    kind: TimeoutKind
    duration: timedelta | None = None

    @classmethod
    def from_str(cls, text: str) -> "KeyTimeout":
        if text == "perm":
            return cls(TimeoutKind.PERMANENT)
        if text == "expd":
            return cls(TimeoutKind.EXPIRED)
        if not text:
            raise _error("Unable to parse keytimeout of ''")
        value = parse_int(text[:-1])
        seconds = _UNIT_SECONDS.get(text[-1])
        if seconds is None:
            raise _error(f"Unable to parse keytimeout of {text!r}")
        return cls(TimeoutKind.TIMEOUT, timedelta(seconds=value * seconds))


@dataclass(frozen=True)
class KeyType:
    """The type of a key, by its kernel name."""

    name: str

    USER: ClassVar["KeyType"]
    KEYRING: ClassVar["KeyType"]
    LOGON: ClassVar["KeyType"]
    BIG_KEY: ClassVar["KeyType"]

    _KNOWN: ClassVar[frozenset[str]] = frozenset({"user", "keyring", "logon", "big_key"})

    @classmethod
    def from_str(cls, text: str) -> "KeyType":
        return cls(text)

    @property
    def is_other(self) -> bool:
        """True for the rarer, specialised key types."""
        return self.name not in self._KNOWN


KeyType.USER = KeyType("user")
KeyType.KEYRING = KeyType("keyring")
KeyType.LOGON = KeyType("logon")
KeyType.BIG_KEY = KeyType("big_key")


@dataclass(frozen=True)
class Key:
    """One key from /proc/keys."""

    id: int
    flags: KeyFlags
    usage: int
    timeout: KeyTimeout
    permissions: Permissions
    uid: int
    gid: int | None
    key_type: KeyType
    description: str

    @classmethod
    def from_line(cls, line: str) -> "Key":
        fields = iter(line.split())
        key_id = parse_int(expect(next(fields, None)), radix=16)
        flags_text = expect(next(fields, None))
        usage = parse_int(expect(next(fields, None)), bits=32)
        timeout_text = expect(next(fields, None))
        perms_text = expect(next(fields, None))
        uid = parse_int(expect(next(fields, None)), bits=32)
        gid_text = expect(next(fields, None))
        type_text = expect(next(fields, None))
        description = " ".join(fields)
        return cls(
            id=key_id,
            flags=KeyFlags.from_str(flags_text),
            usage=usage,
            timeout=KeyTimeout.from_str(timeout_text),
            permissions=Permissions.from_str(perms_text),
            uid=uid,
            gid=None if gid_text == "-1" else parse_int(gid_text, bits=32),
            key_type=KeyType.from_str(type_text),
            description=description,
        )


@dataclass
class Keys:
    """All keys listed in /proc/keys."""

    keys: list[Key] = field(default_factory=list)

    @classmethod
    def parse(cls, source: Source) -> "Keys":
        return cls([Key.from_line(line) for line in split_lines(source)])

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "Keys":
        return read_file(path, cls.parse)

    def __iter__(self) -> Iterator[Key]:
        return iter(self.keys)


def _pair(text: str) -> tuple[int, int]:
    parts = iter(text.split("/"))
    first = parse_int(expect(next(parts, None)), bits=32)
    second = parse_int(expect(next(parts, None)), bits=32)
    return first, second


@dataclass(frozen=True)
class KeyUser:
    """Key usage and quotas of one user, from /proc/key-users."""

    uid: int
    usage: int
    nkeys: int
    nikeys: int
    qnkeys: int
    maxkeys: int
    qnbytes: int
    maxbytes: int

    @classmethod
    def from_line(cls, line: str) -> "KeyUser":
        fields = iter(line.split())
        uid_text = expect(next(fields, None))
        usage = parse_int(expect(next(fields, None)), bits=32)
        keys_text = expect(next(fields, None))
        qkeys_text = expect(next(fields, None))
        qbytes_text = expect(next(fields, None))
        nkeys, nikeys = _pair(keys_text)
        qnkeys, maxkeys = _pair(qkeys_text)
        qnbytes, maxbytes = _pair(qbytes_text)
        return cls(
            uid=parse_int(uid_text[:-1], bits=32),
            usage=usage,
            nkeys=nkeys,
            nikeys=nikeys,
            qnkeys=qnkeys,
            maxkeys=maxkeys,
            qnbytes=qnbytes,
            maxbytes=maxbytes,
        )


@dataclass
class KeyUsers:
    """Users with at least one key, keyed by uid."""

    users: dict[int, KeyUser] = field(default_factory=dict)

    @classmethod
    def parse(cls, source: Source) -> "KeyUsers":
        users: dict[int, KeyUser] = {}
        for line in split_lines(source):
            user = KeyUser.from_line(line)
            users[user.uid] = user
        return cls(users)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "KeyUsers":
        return read_file(path, cls.parse)