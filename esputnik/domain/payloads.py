"""Request payloads, one per endpoint that takes a body or a search filter.

Optional fields are ``None`` when not given and are left out of the JSON
(see :meth:`Dto.to_dict`). ``RawPayload`` is the only untyped body and is
accepted by the bulk contact update alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import Contact, Dto, nested, wire


def as_list(value: Any) -> List[Any]:
    """Wraps a scalar recipient (address, phone, locator) into a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass
class ContactSearchParams(Dto):
    """Query filters of ``GET v1/contacts``."""
    email: Optional[str] = None
    sms: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    contactKey: Optional[str] = None
    addressBookId: Optional[int] = None


@dataclass
class ContactsBulkUpdate(Dto):
    contacts: List[Contact] = nested(Contact, default_factory=list)
    dedupeOn: Optional[str] = None
    fieldId: Optional[int] = None
    customFieldsIDs: Optional[List[int]] = None
    groupNames: Optional[List[str]] = None
    restoreDeleted: Optional[bool] = None


@dataclass(frozen=True)
class RawPayload:
    """Free-form JSON sent as is."""
    body: Any

    def to_dict(self) -> Any:
        return self.body


@dataclass
class UnsubscribedEmails(Dto):
    emails: List[str] = field(default_factory=list)


@dataclass
class SendEmailRequest(Dto):
    from_: str = wire("from", default="")
    subject: str = ""
    htmlText: str = ""
    plainText: str = ""
    emails: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    campaignId: Optional[int] = None
    externalRequestId: Optional[str] = None
    skipPersonalisation: bool = False


@dataclass
class SendSmsRequest(Dto):
    phoneNumbers: List[str] = field(default_factory=list)
    text: str = ""
    from_: str = wire("from", default="reklama")
    tags: List[str] = field(default_factory=list)
    groupId: Optional[int] = None
    externalRequestId: Optional[str] = None


@dataclass
class MessageParam(Dto):
    """Substitution value for a prepared message template."""
    key: Optional[str] = None
    value: Optional[Any] = None

    @classmethod
    def from_mapping(cls, values: Dict[str, Any]) -> List["MessageParam"]:
        return [cls(key=k, value=v) for k, v in values.items()]


@dataclass
class PreparedMessageRequest(Dto):
    groupId: Optional[int] = None
    contactId: Optional[int] = None
    params: List[MessageParam] = nested(MessageParam, default_factory=list)
    recipients: List[str] = field(default_factory=list)
    fromName: Optional[str] = None
    campaignId: Optional[int] = None
    allowUnconfirmed: bool = False
    externalRequestId: Optional[str] = None
