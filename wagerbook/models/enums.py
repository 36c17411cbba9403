"""Enumerations shared by the ORM models and services."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """One of the ten independent outcome channels of a slot."""

    XA = "XA"
    XB = "XB"
    XC = "XC"
    XD = "XD"
    XE = "XE"
    XF = "XF"
    XG = "XG"
    XH = "XH"
    XI = "XI"
    XJ = "XJ"

    @classmethod
    def parse(cls, value: object) -> "Category":
        """Accept a member or its (case-insensitive) name; raise ValueError otherwise."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid category: {value!r}")
        return cls(value.strip().upper())


class TransactionType(str, Enum):
    ADD_MONEY = "add_money"
    BET = "bet"
    WIN = "win"
    ADMIN_ADD = "admin_add"
    ADMIN_DEDUCT = "admin_deduct"

    @property
    def sign(self) -> int:
        """+1 for credits, -1 for debits."""

        if self in (TransactionType.BET, TransactionType.ADMIN_DEDUCT):
            return -1
        return 1


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
