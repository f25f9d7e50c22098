"""Customer and administrator accounts (identity and role only)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

ROLE_CUSTOMER = "customer"
ROLE_VIP = "vip"
ROLE_ADMIN = "admin"


@dataclass
class User:
    """
    A person who places orders or administers the shop.

    Passwords and sessions belong to the authentication layer and are
    not stored here.
    """

    username: str
    email: str = ""
    role: str = ROLE_CUSTOMER

    @property
    def is_vip(self) -> bool:
        return (self.role or "").strip().lower() == ROLE_VIP

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == ROLE_ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
