from macfleet.utils.redaction import Redactor


def test_redact_serial_keeps_last_four():
    assert Redactor().redact_serial("C02XK1ABCDEF") == "xxxxxxxxCDEF"
    assert Redactor().redact_serial("ABC") == "ABC"


def test_redact_email_is_stable_per_user():
    redactor = Redactor()

    first = redactor.redact_email("jane@example.com")
    second = redactor.redact_email("john@example.com")

    assert first == "user01@example.com"
    assert second == "user02@example.com"
    assert redactor.redact_email("jane@example.com") == first


def test_disabled_redactor_passes_values_through():
    redactor = Redactor(enabled=False)

    assert redactor.redact_serial("C02XK1ABCDEF") == "C02XK1ABCDEF"
    assert redactor.redact_email("jane@example.com") == "jane@example.com"
