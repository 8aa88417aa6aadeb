from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


def wire(name: str, **kwargs: Any) -> Any:
    """Field whose JSON key differs from the attribute name (``from_`` -> ``from``)."""
    return field(metadata={"wire": name}, **kwargs)


def nested(dto: type, **kwargs: Any) -> Any:
    """Field holding one DTO or a list of DTOs of the given type."""
    return field(metadata={"dto": dto}, **kwargs)


def _dump(value: Any) -> Any:
    if isinstance(value, Dto):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


class Dto:
    """Base for all records hydrated from decoded JSON.

    ``from_dict`` ignores unknown keys and treats missing ones as absent;
    ``to_dict`` writes wire names and drops ``None`` fields.
    """

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]):
        if not isinstance(data, dict):
            data = {}
        kwargs = {}
        for f in fields(cls):
            key = f.metadata.get("wire", f.name)
            if key not in data:
                continue
            value = data[key]
            dto = f.metadata.get("dto")
            if dto is not None and value is not None:
                if isinstance(value, list):
                    value = [dto.from_dict(v) for v in value]
                else:
                    value = dto.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[f.metadata.get("wire", f.name)] = _dump(value)
        return out


# ---------------------------------------------------------------------- #
# Contacts
# ---------------------------------------------------------------------- #

@dataclass
class Channel(Dto):
    """Contact channel: ``type`` is "email", "sms", "push", ..."""
    type: Optional[str] = None
    value: Optional[str] = None


@dataclass
class ContactField(Dto):
    id: Optional[int] = None
    value: Optional[str] = None


@dataclass
class Address(Dto):
    region: Optional[str] = None
    town: Optional[str] = None
    address: Optional[str] = None
    postcode: Optional[str] = None


@dataclass
class Group(Dto):
    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None


@dataclass
class Contact(Dto):
    # id is assigned by the server on create
    id: Optional[int] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    channels: Optional[List[Channel]] = nested(Channel, default=None)
    address: Optional[Address] = nested(Address, default=None)
    addressBookId: Optional[int] = None
    fields: Optional[List[ContactField]] = nested(ContactField, default=None)
    contactKey: Optional[str] = None
    groups: Optional[List[Group]] = nested(Group, default=None)
    ordersInfo: Optional[str] = None

    def channel(self, channel_type: str) -> Optional[str]:
        for ch in self.channels or []:
            if ch.type == channel_type:
                return ch.value
        return None

    @property
    def email(self) -> Optional[str]:
        return self.channel("email")

    @property
    def sms(self) -> Optional[str]:
        return self.channel("sms")


@dataclass
class Contacts(Dto):
    """Page of contacts; ``totalCount`` comes from the ``TotalCount`` header."""
    totalCount: Optional[int] = None
    contacts: List[Contact] = nested(Contact, default_factory=list)


@dataclass
class SubscribeContact(Dto):
    contact: Contact = nested(Contact, default_factory=Contact)
    groups: Optional[List[str]] = None
    formType: Optional[str] = None


# ---------------------------------------------------------------------- #
# Address books / account
# ---------------------------------------------------------------------- #

@dataclass
class FieldDto(Dto):
    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None
    required: Optional[bool] = None
    description: Optional[str] = None
    possibleValues: Optional[List[str]] = None


@dataclass
class FieldGroup(Dto):
    name: Optional[str] = None
    fields: Optional[List[FieldDto]] = nested(FieldDto, default=None)


@dataclass
class AddressBook(Dto):
    addressBookId: Optional[int] = None
    name: Optional[str] = None
    fieldGroups: Optional[List[FieldGroup]] = nested(FieldGroup, default=None)


@dataclass
class Balance(Dto):
    currency: Optional[str] = None
    currentBalance: Optional[float] = None
    creditLimit: Optional[float] = None
    bonusEmails: Optional[int] = None
    bonusSmses: Optional[int] = None


@dataclass
class Version(Dto):
    version: Optional[str] = None


@dataclass
class InterfaceDto(Dto):
    id: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None


@dataclass
class ImportSessionStatus(Dto):
    status: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CallOut(Dto):
    """SMS mailing statistics row."""
    id: Optional[int] = None
    name: Optional[str] = None
    status: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    sent: Optional[int] = None
    delivered: Optional[int] = None
    undelivered: Optional[int] = None
    read: Optional[int] = None
    clicked: Optional[int] = None
    unsubscribed: Optional[int] = None


# ---------------------------------------------------------------------- #
# Messages
# ---------------------------------------------------------------------- #

@dataclass
class EmailMessage(Dto):
    id: Optional[int] = None
    name: Optional[str] = None
    from_: Optional[str] = wire("from", default=None)
    subject: Optional[str] = None
    htmlText: Optional[str] = None
    plainText: Optional[str] = None
    tags: Optional[List[str]] = None


@dataclass
class SMSMessage(Dto):
    id: Optional[int] = None
    name: Optional[str] = None
    from_: Optional[str] = wire("from", default=None)
    text: Optional[str] = None
    tags: Optional[List[str]] = None


@dataclass
class SendMessageResultDto(Dto):
    locator: Optional[str] = None
    status: Optional[str] = None
    requestId: Optional[str] = None
    message: Optional[str] = None


@dataclass
class InstantMessageStatusDto(Dto):
    id: Optional[str] = None
    requestId: Optional[str] = None
    externalRequestId: Optional[str] = None
    status: Optional[str] = None
    statusDescription: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass
class SmartRecipient(Dto):
    locator: Optional[str] = None
    jsonParam: Optional[str] = None
    contactId: Optional[int] = None
    externalRequestId: Optional[str] = None


@dataclass
class MessageParams(Dto):
    """Payload of a smart (extended) prepared-message send."""
    recipients: List[SmartRecipient] = nested(SmartRecipient, default_factory=list)
    email: Optional[bool] = None
    fromName: Optional[str] = None


# ---------------------------------------------------------------------- #
# Events
# ---------------------------------------------------------------------- #

@dataclass
class EventParam(Dto):
    name: Optional[str] = None
    value: Optional[str] = None


@dataclass
class EventDto(Dto):
    eventTypeKey: Optional[str] = None
    keyValue: Optional[str] = None
    params: Optional[List[EventParam]] = nested(EventParam, default=None)
