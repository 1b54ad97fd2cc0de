from datetime import datetime

import pytest
from pydantic import ValidationError

from macfleet.models import Credentials, DeviceRecord, UpdatePlan, parse_search_payload

from fakes import computer, search_payload


def test_device_record_from_search_payload():
    entry = computer(5, serial=" C02 ", last_check_in="2026-10-16 09:00:00")
    response = parse_search_payload(search_payload(entry))
    (device,) = response.devices

    assert device.id == 5
    assert device.serial_number == "C02"
    assert device.os_version == "15.3.1"
    assert device.last_check_in == datetime(2026, 10, 16, 9, 0, 0)


def test_device_record_tolerates_missing_fields():
    device = DeviceRecord.model_validate(
        {"id": 1, "Email_Address": None, "Last_Check_in": "never"}
    )

    assert device.email_address == ""
    assert device.last_check_in is None
    assert device.model == ""


def test_search_payload_requires_computer_list():
    with pytest.raises(ValidationError):
        parse_search_payload({"advanced_computer_search": {"id": 1}})


def test_update_plan_dedupes_and_truncates_seconds():
    plan = UpdatePlan(
        device_ids=[3, "1", "3"],
        schedule_time=datetime(2030, 2, 14, 3, 30, 0, 12345),
    )

    assert plan.device_ids == ("3", "1")
    assert plan.schedule_string == "2030-02-14T03:30:00"


def test_credentials_strip_trailing_slash_and_hide_secret():
    creds = Credentials(
        backend_url="https://x.jamfcloud.com/",
        client_id="id",
        client_secret="hunter2",
    )

    assert creds.backend_url == "https://x.jamfcloud.com"
    assert creds.default_search_id == "113"
    assert "hunter2" not in repr(creds)


@pytest.mark.parametrize("search_id", ["", "abc", "12a"])
def test_credentials_reject_non_numeric_search_id(search_id):
    with pytest.raises(ValidationError):
        Credentials(
            backend_url="https://x",
            client_id="id",
            client_secret="s",
            default_search_id=search_id,
        )
