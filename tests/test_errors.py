import pytest

from topicrelay.errors import (
    ContactError,
    ErrorKind,
    HandlerError,
    SettingsError,
    StartError,
)


def test_error_carries_kind_and_message():
    err = ContactError(ErrorKind.NO_TOPIC_USER)

    assert err.kind is ErrorKind.NO_TOPIC_USER
    assert err.message == "This topic does not belong to any user."
    assert str(err) == err.message
    assert isinstance(err, HandlerError)


def test_custom_message_keeps_kind():
    err = SettingsError(ErrorKind.NO_SETTINGS_CHAT, "Run /settings_chat first")

    assert err.kind is ErrorKind.NO_SETTINGS_CHAT
    assert str(err) == "Run /settings_chat first"


@pytest.mark.parametrize(
    "error_cls,kind",
    [
        (SettingsError, ErrorKind.NO_CONTACT_CHAT),
        (ContactError, ErrorKind.CHAT_ALREADY_SETTINGS_CHAT),
        (StartError, ErrorKind.NO_TOPIC_USER),
    ],
)
def test_error_families_are_closed(error_cls, kind):
    with pytest.raises(ValueError):
        error_cls(kind)


def test_every_kind_has_a_message():
    for kind in ErrorKind:
        assert HandlerError(kind).message
