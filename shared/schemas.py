from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class JoinRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)
    fName: str = Field(default="", max_length=80)
    lName: str = Field(default="", max_length=80)
    phone: str = Field(default="", max_length=40)


class JoinResponse(BaseModel):
    success: bool
    message: str


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)


class ScopedTokenResponse(BaseModel):
    token: str
    token_type: Literal["bearer"] = "bearer"


class TokenValidityResponse(BaseModel):
    allowed: bool


class BankInfo(BaseModel):
    name: str = ""
    account: str = ""
    routing: str = ""


class OrganizationInput(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = ""
    address: str = ""
    phone: str = ""
    website: str = ""
    logo_url: str = ""
    bank: BankInfo = Field(default_factory=BankInfo)


class ContactInput(BaseModel):
    name: str
    email: str
    phone: str = ""
    title: str | None = None


class EventInput(BaseModel):
    # type-specific fields (sponsor_levels, prizes, ...) ride along as extras
    model_config = ConfigDict(extra="allow")

    type: str
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    is_private: bool | str = False
    keywords: list[str] = Field(default_factory=list)
    pic_urls: list[str] = Field(default_factory=list)
    contacts: list[ContactInput] = Field(default_factory=list)
    goal_amount: str = ""


class NewEventRequest(BaseModel):
    organization_id: str | None = None
    organization: OrganizationInput | None = None
    event: EventInput


class NewEventResponse(BaseModel):
    success: bool
    event_id: str


class EventUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    is_private: bool | str | None = None
    keywords: list[str] | None = None
    pic_urls: list[str] | None = None
    contacts: list[ContactInput] | None = None
    goal_amount: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class MembershipRequest(BaseModel):
    # role is checked by the service so a bad value is a 400, not a 422
    type: str
    email: str = Field(min_length=3, max_length=320)


class MembershipResponse(BaseModel):
    success: bool
    ids: list[str]


class InviteRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    message: str | None = Field(default=None, max_length=2000)


class InviteResponse(BaseModel):
    sent: bool
