from nexus.domain.services.presence_registry import PresenceRegistry


def test_lookup_unknown_user_is_none():
    assert PresenceRegistry().lookup(42) is None


def test_register_replaces_previous_channel(make_channel):
    registry = PresenceRegistry()
    c1, c2 = make_channel("c1"), make_channel("c2")
    registry.register(1, c1)
    registry.register(1, c2)
    assert registry.lookup(1) is c2
    assert len(registry) == 1


def test_unregister_with_stale_channel_is_noop(make_channel):
    registry = PresenceRegistry()
    c1, c2 = make_channel("c1"), make_channel("c2")
    registry.register(1, c1)
    registry.register(1, c2)

    assert registry.unregister(1, c1) is False
    assert registry.lookup(1) is c2

    assert registry.unregister(1, c2) is True
    assert registry.lookup(1) is None


def test_unregister_compares_identity_not_equality():
    class AlwaysEqual:
        is_open = True

        def __eq__(self, other):
            return True

        __hash__ = object.__hash__

        async def send_frame(self, frame):
            pass

    registry = PresenceRegistry()
    current = AlwaysEqual()
    registry.register(7, current)
    assert registry.unregister(7, AlwaysEqual()) is False
    assert registry.lookup(7) is current


def test_is_online_requires_open_channel(make_channel):
    registry = PresenceRegistry()
    closed = make_channel(open_=False)
    registry.register(3, closed)
    assert registry.is_online(3) is False
    registry.register(3, make_channel())
    assert registry.is_online(3) is True
    assert registry.is_online(4) is False
