"""
Customer entity used throughout the lifecycle walkthroughs.
"""

from __future__ import annotations

from typing import Optional

from ..core import Model, StringField


class Customer(Model):
    first_name = StringField(max_length=255)
    last_name = StringField(max_length=255)

    def __init__(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id=id, first_name=first_name, last_name=last_name)

    def update_name(self, first_name: str, last_name: str) -> None:
        self.first_name = first_name
        self.last_name = last_name
