from esputnik.domain.models import Contact
from esputnik.domain.payloads import (
    ContactSearchParams,
    ContactsBulkUpdate,
    MessageParam,
    PreparedMessageRequest,
    RawPayload,
    SendEmailRequest,
    SendSmsRequest,
    as_list,
)


def test_as_list():
    assert as_list("a@example.com") == ["a@example.com"]
    assert as_list(["a", "b"]) == ["a", "b"]
    assert as_list(("a",)) == ["a"]
    assert as_list(None) == []


def test_send_email_request_omits_absent_optionals():
    body = SendEmailRequest(
        from_="shop@example.com",
        subject="Hi",
        htmlText="<p>Hi</p>",
        plainText="Hi",
        emails=["ann@example.com"],
    ).to_dict()

    assert body == {
        "from": "shop@example.com",
        "subject": "Hi",
        "htmlText": "<p>Hi</p>",
        "plainText": "Hi",
        "emails": ["ann@example.com"],
        "tags": [],
        "skipPersonalisation": False,
    }


def test_send_sms_request_defaults():
    body = SendSmsRequest(phoneNumbers=["+380501234567"], text="Hello", groupId=4).to_dict()
    assert body["from"] == "reklama"
    assert body["groupId"] == 4
    assert "externalRequestId" not in body


def test_prepared_message_request_params():
    req = PreparedMessageRequest(
        params=MessageParam.from_mapping({"name": "Ann", "discount": 10}),
        recipients=["ann@example.com"],
    )
    body = req.to_dict()
    assert body["params"] == [{"key": "name", "value": "Ann"}, {"key": "discount", "value": 10}]
    assert body["allowUnconfirmed"] is False
    assert "groupId" not in body


def test_contact_search_params_only_set_filters():
    assert ContactSearchParams(email="ann@example.com").to_dict() == {"email": "ann@example.com"}


def test_bulk_update_and_raw_payload():
    bulk = ContactsBulkUpdate(contacts=[Contact(firstName="Ann")], dedupeOn="email")
    assert bulk.to_dict() == {"contacts": [{"firstName": "Ann"}], "dedupeOn": "email"}

    raw = RawPayload({"contacts": [{"anything": True}], "custom": 1})
    assert raw.to_dict() == {"contacts": [{"anything": True}], "custom": 1}
