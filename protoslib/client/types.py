"""Response types of the informational endpoints."""

from pydantic import AliasChoices, BaseModel, Field


class AppInfo(BaseModel):
    """Information Protos holds about the calling application."""

    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))


class DomainInfo(BaseModel):
    domain: str = Field(default="", validation_alias=AliasChoices("domain", "Domain"))


class UserInfo(BaseModel):
    """An authenticated Protos user."""

    username: str = Field(default="", validation_alias=AliasChoices("username", "Username"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))
    isadmin: bool = Field(default=False, validation_alias=AliasChoices("isadmin", "IsAdmin"))
