from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    data: Dict[str, Any] = Field(default_factory=dict)


class EventAckOut(BaseModel):
    ok: bool
    event: str


# -------- Identity provider payloads --------
# Only the fields we mirror; the provider sends many more.
class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class EmailAddress(_ProviderModel):
    email_address: Optional[str] = None


class UserData(_ProviderModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_addresses: List[EmailAddress] = Field(default_factory=list)
    image_url: Optional[str] = None

    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    def primary_email(self) -> str:
        if self.email_addresses and self.email_addresses[0].email_address:
            return self.email_addresses[0].email_address
        return f"{self.id}@users.placeholder.invalid"


class DeletedObjectData(_ProviderModel):
    id: str


class OrganizationData(_ProviderModel):
    id: str
    name: str
    slug: Optional[str] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None


class OrganizationRef(_ProviderModel):
    id: str


class PublicUserData(_ProviderModel):
    user_id: str


class OrganizationMembershipData(_ProviderModel):
    organization: OrganizationRef
    public_user_data: PublicUserData
    role: str = "org:member"
    role_name: Optional[str] = None

    def normalized_role(self) -> str:
        """'org:admin' / 'admin' -> 'ADMIN'; any other provider role is a plain MEMBER."""
        raw = self.role_name or self.role
        if raw.startswith("org:"):
            raw = raw[len("org:"):]
        return "ADMIN" if raw.strip().upper() == "ADMIN" else "MEMBER"
