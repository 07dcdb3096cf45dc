from telegram_bridge.access import AccessFilter


def test_allowed_chat_is_authorized() -> None:
    access = AccessFilter([100, 200])
    assert access.is_authorized(100)
    assert access.is_authorized(200)


def test_unknown_chat_is_not_authorized() -> None:
    access = AccessFilter([100])
    assert not access.is_authorized(101)
    assert not access.is_authorized("100")


def test_allow_list_is_frozen_copy() -> None:
    source = {100}
    access = AccessFilter(source)
    source.add(999)
    assert not access.is_authorized(999)
    assert access.allowed == frozenset({100})
    assert len(access) == 1


def test_empty_allow_list_rejects_everything() -> None:
    access = AccessFilter(())
    assert not access
    assert not access.is_authorized(100)
