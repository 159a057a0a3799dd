"""Unit tests for the in-process named broadcast channels."""

from salespro_sync.domain.entities import SYNC_UPDATE, SyncEvent
from salespro_sync.infrastructure.broadcast.broadcast_channel import BroadcastHub


def test_publish_reaches_every_other_channel_of_the_same_name():
    hub = BroadcastHub()
    sender, peer_a, peer_b = hub.open("sync"), hub.open("sync"), hub.open("sync")
    other_name = hub.open("elsewhere")
    received: dict[str, list[SyncEvent]] = {"a": [], "b": [], "other": []}
    peer_a.subscribe(received["a"].append)
    peer_b.subscribe(received["b"].append)
    other_name.subscribe(received["other"].append)

    sender.publish()

    assert len(received["a"]) == 1
    assert len(received["b"]) == 1
    assert received["other"] == []
    assert received["a"][0].type == SYNC_UPDATE


def test_publisher_does_not_receive_its_own_signal():
    hub = BroadcastHub()
    sender = hub.open("sync")
    own: list[SyncEvent] = []
    sender.subscribe(own.append)

    sender.publish()

    assert own == []


def test_unsubscribe_stops_delivery():
    hub = BroadcastHub()
    sender, peer = hub.open("sync"), hub.open("sync")
    received: list[SyncEvent] = []
    unsubscribe = peer.subscribe(received.append)

    sender.publish()
    unsubscribe()
    unsubscribe()
    sender.publish()

    assert len(received) == 1


def test_closed_channel_neither_sends_nor_receives():
    hub = BroadcastHub()
    sender, peer = hub.open("sync"), hub.open("sync")
    received: list[SyncEvent] = []
    peer.subscribe(received.append)

    peer.close()
    sender.publish()
    assert received == []
    assert hub.channel_count("sync") == 1

    sender.close()
    sender.publish()
    assert hub.channel_count("sync") == 0


def test_failing_subscriber_does_not_block_the_others():
    hub = BroadcastHub()
    sender, peer = hub.open("sync"), hub.open("sync")
    received: list[SyncEvent] = []

    def broken(event: SyncEvent) -> None:
        raise RuntimeError("listener crashed")

    peer.subscribe(broken)
    peer.subscribe(received.append)

    sender.publish()

    assert len(received) == 1


def test_hubs_are_isolated_from_each_other():
    first, second = BroadcastHub(), BroadcastHub()
    sender = first.open("sync")
    stranger = second.open("sync")
    received: list[SyncEvent] = []
    stranger.subscribe(received.append)

    sender.publish()

    assert received == []
