from gemcascade.events.bus import EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("test", handler)
    bus.emit("test", value=42, msg="hello")

    assert received["value"] == 42
    assert received["msg"] == "hello"


def test_event_bus_unsubscribe_and_unknown_events():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    bus.emit("nobody_listens", value=1)
    bus.subscribe("test", handler)
    bus.emit("test", value=1)
    bus.unsubscribe("test", handler)
    bus.emit("test", value=2)
    bus.unsubscribe("never_subscribed", handler)
    assert calls == [{"value": 1}]


def test_event_bus_payload_may_carry_a_name_key():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("achievement_unlocked", handler)
    bus.emit("achievement_unlocked", achievement_id="first_match", name="First Match", reward=10)

    assert received == {"achievement_id": "first_match", "name": "First Match", "reward": 10}
