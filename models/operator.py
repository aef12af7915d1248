"""
Operator schemas.
"""

from pydantic import Field

from models.base import BaseSchema


class Operator(BaseSchema):
    """Logged-in store operator."""

    username: str = Field(..., min_length=1, description="Login name")
    store_name: str = Field(
        ...,
        min_length=1,
        description="Store name, matches the sheet name in the product workbook"
    )


class OperatorRecord(Operator):
    """
    Operator directory entry.

    Read from users.json, where the store is keyed as "storeName".
    """

    password: str = Field(..., description="Plain password from the directory file")

    def to_operator(self) -> Operator:
        return Operator(username=self.username, store_name=self.store_name)
