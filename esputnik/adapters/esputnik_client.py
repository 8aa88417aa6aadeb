from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Union

from ..common.config import DEFAULT_BASE_URL, Settings, settings as default_settings
from ..common.errors import ESputnikError
from ..common.http_client import DEFAULT_CONNECT_TIMEOUT_S, ApiResponse, Transport
from ..common.logging import logger
from ..common.logging_utils import mask_email, mask_phone, mask_recipients
from ..domain.models import (
    AddressBook,
    Balance,
    CallOut,
    Contact,
    Contacts,
    EmailMessage,
    EventDto,
    Group,
    ImportSessionStatus,
    InstantMessageStatusDto,
    InterfaceDto,
    MessageParams,
    SendMessageResultDto,
    SMSMessage,
    SubscribeContact,
    Version,
)
from ..domain.payloads import (
    ContactSearchParams,
    ContactsBulkUpdate,
    MessageParam,
    PreparedMessageRequest,
    RawPayload,
    SendEmailRequest,
    SendSmsRequest,
    UnsubscribedEmails,
    as_list,
)

TOTAL_COUNT_HEADER = "TotalCount"

SendResult = Union[SendMessageResultDto, List[SendMessageResultDto]]


def page_query(offset: int, limit: int) -> Dict[str, int]:
    """API pages are 1-based: ``startindex = offset + 1``."""
    return {"startindex": offset + 1, "maxrows": limit}


def _keyed(results: Dict[str, Any]) -> bool:
    """A mapping keyed by locator holds only nested result objects."""
    return bool(results) and all(isinstance(v, dict) for v in results.values())


def send_results(data: Any) -> SendResult:
    """Normalizes the answer of a send call.

    - no ``results`` -> one result built from the whole body
    - ``results`` is a single object -> one result
    - otherwise ``results`` is a list (or a mapping keyed by locator) -> list
    """
    if isinstance(data, list):
        return [SendMessageResultDto.from_dict(r) for r in data]
    if not isinstance(data, dict) or data.get("results") is None:
        return SendMessageResultDto.from_dict(data)

    results = data["results"]
    if isinstance(results, dict):
        if not _keyed(results):
            return SendMessageResultDto.from_dict(results)
        results = list(results.values())
    return [SendMessageResultDto.from_dict(r) for r in results]


def status_results(data: Any) -> List[InstantMessageStatusDto]:
    """One status object or a list of them, always returned as a list."""
    results = data.get("results") if isinstance(data, dict) else data
    if not results:
        return []
    if isinstance(results, dict):
        if not _keyed(results):
            return [InstantMessageStatusDto.from_dict(results)]
        results = list(results.values())
    return [InstantMessageStatusDto.from_dict(r) for r in results]


def _join_ids(ids: Iterable[Any]) -> str:
    return ",".join(str(i) for i in ids)


class ESputnikClient:
    """Client for the ESputnik REST API (v1).

    One method per endpoint. Every call is a single request; the status and
    body of a call are never kept on the instance.

    Docs: https://esputnik.com/api/
    """

    def __init__(
        self,
        user: str,
        password: str,
        book_id: int | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        transport: Transport | None = None,
    ) -> None:
        self.book_id = book_id
        self._owns_transport = transport is None
        self.transport = transport or Transport(
            user,
            password,
            base_url=base_url,
            connect_timeout=connect_timeout,
        )

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "ESputnikClient":
        cfg = cfg or default_settings
        return cls(
            cfg.esputnik_user,
            cfg.esputnik_password,
            cfg.esputnik_book_id,
            base_url=cfg.esputnik_base_url,
            connect_timeout=cfg.esputnik_connect_timeout_s,
        )

    def close(self) -> None:
        # an injected transport stays open for its owner
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "ESputnikClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _request(
        self,
        method: str,
        path: str,
        query: Dict[str, Any] | None = None,
        body: Any = None,
    ) -> ApiResponse:
        return self.transport.request(method, path, query or {}, body)

    def _write_or_false(self, method: str, path: str, body: Any = None) -> bool:
        """Update/delete: ``False`` on 404, otherwise truthiness of the body."""
        try:
            resp = self._request(method, path, body=body)
        except ESputnikError as e:
            if e.is_not_found:
                return False
            raise
        return bool(resp.data)

    def _fill_book(self, contact: Contact) -> None:
        if self.book_id is not None and contact.addressBookId is None:
            contact.addressBookId = self.book_id

    def _contacts_page(self, resp: ApiResponse) -> Contacts:
        return Contacts(
            totalCount=resp.header_int(TOTAL_COUNT_HEADER),
            contacts=[Contact.from_dict(c) for c in resp.data or []],
        )

    # ------------------------------------------------------------------ #
    # Account
    # ------------------------------------------------------------------ #

    def get_version(self) -> Version:
        return Version.from_dict(self._request("GET", "v1/version").data)

    def get_address_books(self) -> AddressBook:
        data = self._request("GET", "v1/addressbooks").data or {}
        return AddressBook.from_dict(data.get("addressBook"))

    def get_user_organisation_balance(self) -> Balance:
        return Balance.from_dict(self._request("GET", "v1/balance").data)

    def get_call_outs_sms(self, offset: int = 0, limit: int = 10) -> List[CallOut]:
        resp = self._request("GET", "v1/callouts/sms", page_query(offset, limit))
        return [CallOut.from_dict(row) for row in resp.data or []]

    def get_sms_interfaces(self) -> List[InterfaceDto]:
        return [InterfaceDto.from_dict(i) for i in self._request("GET", "v1/interfaces/sms").data or []]

    def get_email_interfaces(self) -> List[InterfaceDto]:
        return [InterfaceDto.from_dict(i) for i in self._request("GET", "v1/interfaces/email").data or []]

    def get_import_session_status(self, session_id: str) -> ImportSessionStatus:
        return ImportSessionStatus.from_dict(self._request("GET", f"v1/importstatus/{session_id}").data)

    # ------------------------------------------------------------------ #
    # Contacts
    # ------------------------------------------------------------------ #

    def search_contacts(
        self,
        offset: int = 0,
        limit: int = 500,
        params: ContactSearchParams | None = None,
    ) -> Contacts:
        query: Dict[str, Any] = params.to_dict() if params else {}
        query.update(page_query(offset, limit))
        return self._contacts_page(self._request("GET", "v1/contacts", query))

    def contacts_bulk_update(self, payload: Union[ContactsBulkUpdate, RawPayload]) -> Any:
        """Adds or updates many contacts at once.

        Takes a typed :class:`ContactsBulkUpdate` or a :class:`RawPayload`
        that is sent unchanged. Returns the decoded body.
        """
        if not isinstance(payload, (ContactsBulkUpdate, RawPayload)):
            raise TypeError("payload must be ContactsBulkUpdate or RawPayload")
        return self._request("POST", "v1/contacts", body=payload.to_dict()).data

    def get_contact_emails(self, ids: Iterable[int]) -> Dict[int, str]:
        """Maps contact ids onto their e-mail addresses."""
        data = self._request("GET", "v1/contacts/email", {"ids": _join_ids(ids)}).data or {}
        return {
            item["contactId"]: item.get("email")
            for item in data.get("results") or []
            if isinstance(item, dict) and "contactId" in item
        }

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        try:
            resp = self._request("GET", f"v1/contact/{contact_id}")
        except ESputnikError as e:
            if e.is_not_found:
                return None
            raise
        return Contact.from_dict(resp.data)

    def add_contact(self, contact: Contact) -> bool:
        """Creates the contact and stores the server id on ``contact.id``."""
        self._fill_book(contact)
        data = self._request("POST", "v1/contact", body=contact.to_dict()).data
        if isinstance(data, dict) and "id" in data:
            contact.id = data["id"]
            logger.info({"esputnik": "contact_added", "id": contact.id, "email": mask_email(contact.email)})
            return True
        logger.warning({"esputnik": "contact_add_no_id", "email": mask_email(contact.email)})
        return False

    def update_contact(self, contact: Contact) -> bool:
        return self._write_or_false("PUT", f"v1/contact/{contact.id}", contact.to_dict())

    def subscribe_contact(self, subscribe: SubscribeContact) -> bool:
        self._fill_book(subscribe.contact)
        resp = self._request("POST", "v1/contact/subscribe", body=subscribe.to_dict())
        return resp.data is not False

    def delete_contact(self, contact: Union[int, Contact]) -> bool:
        contact_id = contact.id if isinstance(contact, Contact) else contact
        return self._write_or_false("DELETE", f"v1/contact/{contact_id}")

    def add_to_unsubscribed(self, emails: List[str]) -> bool:
        payload = UnsubscribedEmails(emails=as_list(emails))
        logger.info({"esputnik": "unsubscribe_add", "emails": mask_recipients(payload.emails)})
        return self._request("POST", "v1/emails/unsubscribed/add", body=payload.to_dict()).data is not False

    def delete_from_unsubscribed(self, emails: List[str]) -> bool:
        payload = UnsubscribedEmails(emails=as_list(emails))
        logger.info({"esputnik": "unsubscribe_delete", "emails": mask_recipients(payload.emails)})
        return self._request("POST", "v1/emails/unsubscribed/delete", body=payload.to_dict()).data is not False

    # ------------------------------------------------------------------ #
    # Groups
    # ------------------------------------------------------------------ #

    def search_groups(self, name: str = "", offset: int = 0, limit: int = 500) -> List[Group]:
        query = page_query(offset, limit)
        query["name"] = name
        return [Group.from_dict(g) for g in self._request("GET", "v1/groups", query).data or []]

    def get_group_contacts(self, group: Union[int, Group], offset: int = 0, limit: int = 500) -> Contacts:
        group_id = group.id if isinstance(group, Group) else group
        resp = self._request("GET", f"v1/group/{group_id}/contacts", page_query(offset, limit))
        return self._contacts_page(resp)

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    def register_event(self, event: EventDto) -> bool:
        return self._request("POST", "v1/event", body=event.to_dict()).data is not False

    def resend_events(self, event_type_id: int, start: int, end: int) -> Any:
        query = {"eventTypeId": event_type_id, "start": start, "end": end}
        return self._request("GET", "v1/event", query).data

    # ------------------------------------------------------------------ #
    # Email messages
    # ------------------------------------------------------------------ #

    def send_email(
        self,
        from_: str,
        subject: str,
        html_text: str,
        plain_text: str,
        emails: Union[str, List[str]],
        tags: List[str] | None = None,
        campaign_id: int | None = None,
        external_request_id: str | None = None,
        skip_personalisation: bool = False,
    ) -> SendResult:
        payload = SendEmailRequest(
            from_=from_,
            subject=subject,
            htmlText=html_text,
            plainText=plain_text,
            emails=as_list(emails),
            tags=list(tags or []),
            campaignId=campaign_id,
            externalRequestId=external_request_id,
            skipPersonalisation=skip_personalisation,
        )
        resp = self._request("POST", "v1/message/email", body=payload.to_dict())
        logger.info({"esputnik": "email_sent", "to": mask_recipients(payload.emails)})
        return send_results(resp.data)

    def add_email(self, message: EmailMessage) -> bool:
        data = self._request("POST", "v1/messages/email", body=message.to_dict()).data
        if isinstance(data, dict) and "id" in data:
            message.id = data["id"]
            logger.info({"esputnik": "email_added", "id": message.id})
            return True
        return False

    def search_emails(self, search: str = "", offset: int = 0, limit: int = 500) -> List[EmailMessage]:
        query = page_query(offset, limit)
        query["search"] = search
        return [EmailMessage.from_dict(m) for m in self._request("GET", "v1/messages/email", query).data or []]

    def get_email(self, message_id: int) -> Optional[EmailMessage]:
        try:
            resp = self._request("GET", f"v1/messages/email/{message_id}")
        except ESputnikError as e:
            if e.is_not_found:
                return None
            raise
        return EmailMessage.from_dict(resp.data)

    def update_message(self, message: EmailMessage) -> bool:
        return self._write_or_false("PUT", f"v1/messages/email/{message.id}", message.to_dict())

    def delete_email(self, message: Union[int, EmailMessage]) -> bool:
        message_id = message.id if isinstance(message, EmailMessage) else message
        return self._write_or_false("DELETE", f"v1/messages/email/{message_id}")

    # ------------------------------------------------------------------ #
    # Instant message status
    # ------------------------------------------------------------------ #

    def get_instant_messages_status(self, ids: Iterable[str]) -> List[InstantMessageStatusDto]:
        resp = self._request("GET", "v1/message/status", {"ids": _join_ids(ids)})
        return status_results(resp.data)

    def get_instant_email_status(self, ids: Iterable[str]) -> List[InstantMessageStatusDto]:
        return self.get_instant_messages_status(ids)

    def get_instant_sms_status(self, ids: Iterable[str]) -> List[InstantMessageStatusDto]:
        return self.get_instant_messages_status(ids)

    # ------------------------------------------------------------------ #
    # SMS
    # ------------------------------------------------------------------ #

    def send_sms(
        self,
        numbers: Union[str, List[str]],
        text: str,
        from_: str = "reklama",
        tags: List[str] | None = None,
        group_id: int | None = None,
        external_request_id: str | None = None,
    ) -> SendResult:
        payload = SendSmsRequest(
            phoneNumbers=as_list(numbers),
            text=text,
            from_=from_,
            tags=list(tags or []),
            groupId=group_id,
            externalRequestId=external_request_id,
        )
        resp = self._request("POST", "v1/message/sms", body=payload.to_dict())
        logger.info({"esputnik": "sms_sent", "to": [mask_phone(n) for n in payload.phoneNumbers]})
        return send_results(resp.data)

    def search_sms(self, search: str = "", offset: int = 0, limit: int = 500) -> List[SMSMessage]:
        query = page_query(offset, limit)
        query["search"] = search
        return [SMSMessage.from_dict(m) for m in self._request("GET", "v1/messages/sms", query).data or []]

    # ------------------------------------------------------------------ #
    # Prepared messages
    # ------------------------------------------------------------------ #

    def send_prepared_message(
        self,
        message_id: int,
        params: List[MessageParam],
        recipients: Union[str, List[str]],
        group_id: int | None = None,
        contact_id: int | None = None,
        from_name: str | None = None,
        campaign_id: int | None = None,
        allow_unconfirmed: bool = False,
        external_request_id: str | None = None,
    ) -> Union[SendResult, bool]:
        """Sends a prepared message; ``False`` when the message id is unknown.

        ``params`` are template substitutions; build them from a plain mapping
        with :meth:`MessageParam.from_mapping`.
        """
        if not all(isinstance(p, MessageParam) for p in params):
            raise TypeError("params must be a list of MessageParam")
        payload = PreparedMessageRequest(
            groupId=group_id,
            contactId=contact_id,
            params=list(params),
            recipients=as_list(recipients),
            fromName=from_name,
            campaignId=campaign_id,
            allowUnconfirmed=allow_unconfirmed,
            externalRequestId=external_request_id,
        )
        try:
            resp = self._request("POST", f"v1/message/{message_id}/send", body=payload.to_dict())
        except ESputnikError as e:
            if e.is_not_found:
                logger.warning({"esputnik": "prepared_message_not_found", "message_id": message_id})
                return False
            raise
        logger.info(
            {"esputnik": "prepared_message_sent", "message_id": message_id, "to": mask_recipients(payload.recipients)}
        )
        return send_results(resp.data)

    def send_extended_prepared_message(
        self,
        message_id: int,
        message_params: MessageParams,
    ) -> Optional[List[SendMessageResultDto]]:
        """Smart send of a prepared message; ``None`` when the id is unknown."""
        try:
            resp = self._request("POST", f"v1/message/{message_id}/smartsend", body=message_params.to_dict())
        except ESputnikError as e:
            if e.is_not_found:
                return None
            raise
        result = send_results(resp.data)
        return result if isinstance(result, list) else [result]
