"""Subset of the Microsoft Graph mail resources used by the forwarder."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GraphUser(GraphModel):
    id: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    mail: Optional[str] = None
    user_principal_name: Optional[str] = Field(None, alias="userPrincipalName")


class MailFolder(GraphModel):
    id: str
    display_name: str = Field("", alias="displayName")
    unread_item_count: int = Field(0, alias="unreadItemCount")
    total_item_count: int = Field(0, alias="totalItemCount")

    @property
    def label(self) -> str:
        return f"{self.display_name} ({self.unread_item_count}/{self.total_item_count})"


class EmailAddress(GraphModel):
    name: Optional[str] = None
    address: Optional[str] = None


class Recipient(GraphModel):
    email_address: Optional[EmailAddress] = Field(None, alias="emailAddress")


class ItemBody(GraphModel):
    content_type: str = Field("html", alias="contentType")
    content: Optional[str] = None


class Message(GraphModel):
    id: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[ItemBody] = None
    has_attachments: Optional[bool] = Field(None, alias="hasAttachments")
    to_recipients: Optional[List[Recipient]] = Field(None, alias="toRecipients")
    cc_recipients: Optional[List[Recipient]] = Field(None, alias="ccRecipients")
    bcc_recipients: Optional[List[Recipient]] = Field(None, alias="bccRecipients")

    def recipient_addresses(self) -> List[str]:
        """Lower-cased To, Cc and Bcc addresses."""
        recipients = (
            (self.to_recipients or [])
            + (self.cc_recipients or [])
            + (self.bcc_recipients or [])
        )
        addresses = []
        for recipient in recipients:
            email = recipient.email_address
            addresses.append(((email.address if email else None) or "").lower())
        return addresses


class DeltaPage(GraphModel):
    """One page of a ``messages/delta`` response."""

    value: List[Message] = Field(default_factory=list)
    next_link: Optional[str] = Field(None, alias="@odata.nextLink")
    delta_link: Optional[str] = Field(None, alias="@odata.deltaLink")

    @property
    def continuation(self) -> Optional[str]:
        """Link to resume from on the next run."""
        return self.next_link or self.delta_link


__all__ = [
    "DeltaPage",
    "EmailAddress",
    "GraphUser",
    "ItemBody",
    "MailFolder",
    "Message",
    "Recipient",
]
