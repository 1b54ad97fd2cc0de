import logging

from macfleet.utils.logging import BearerTokenFilter


def _record(msg, *args):
    return logging.LogRecord("macfleet", logging.DEBUG, __file__, 1, msg, args, None)


def test_bearer_tokens_are_masked():
    record = _record("sent %s", "Authorization: Bearer abc.def.ghi")

    assert BearerTokenFilter().filter(record)
    assert record.getMessage() == "sent Authorization: Bearer ***"


def test_other_messages_are_untouched():
    record = _record("GET %s -> HTTP %s", "https://x/api/v1/auth", 200)

    BearerTokenFilter().filter(record)

    assert record.args == ("https://x/api/v1/auth", 200)
    assert record.getMessage() == "GET https://x/api/v1/auth -> HTTP 200"
