from decimal import Decimal
from typing import Annotated, ClassVar

from sqlalchemy import Dialect, String, Text
from sqlalchemy.orm import DeclarativeBase, mapped_column
from sqlalchemy.types import TypeDecorator


class IntMappedToString(TypeDecorator[int]):
    """
    Store a uint256 as its decimal string. Request and loan IDs are unbounded contract integers and
    would overflow a 64-bit INTEGER column; 78 characters hold any uint256.
    """

    cache_ok = True
    impl = String(78)

    def process_bind_param(
        self,
        value: int | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(
        self,
        value: str | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> int | None:
        if value is None:
            return None
        return int(value)


class DecimalMappedToString(TypeDecorator[Decimal]):
    """
    Store a Decimal as its string representation. Amounts converted from fixed-point token values
    must read back exactly, and SQLite has no exact decimal storage.
    """

    cache_ok = True
    impl = Text

    def process_bind_param(
        self,
        value: Decimal | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(
        self,
        value: str | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


# Column aliases shared by the Cooler tables
Address = Annotated[str, mapped_column(String(42))]
BigInteger = Annotated[int, IntMappedToString]
TransactionHash = Annotated[str, mapped_column(String(66))]
RecordId = Annotated[str, mapped_column(String(128), primary_key=True)]


class Base(DeclarativeBase):
    type_annotation_map: ClassVar = {
        BigInteger: IntMappedToString,
        Decimal: DecimalMappedToString,
        str: Text,
    }
