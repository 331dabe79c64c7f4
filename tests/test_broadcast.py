import asyncio

from foodiebot.services.broadcast import AdminBroadcaster


class FakeSocket:
    def __init__(self, broken=False):
        self.broken = broken
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def test_broadcast_reaches_every_socket():
    broadcaster = AdminBroadcaster()
    a, b = FakeSocket(), FakeSocket()

    async def scenario():
        await broadcaster.connect(a)
        await broadcaster.connect(b)
        await broadcaster.broadcast("new_order", {"order_id": "ORD1"})

    asyncio.run(scenario())
    assert a.accepted and b.accepted
    assert a.sent == b.sent == [{"event": "new_order", "data": {"order_id": "ORD1"}}]


def test_broken_socket_is_dropped():
    broadcaster = AdminBroadcaster()
    good, bad = FakeSocket(), FakeSocket(broken=True)

    async def scenario():
        await broadcaster.connect(good)
        await broadcaster.connect(bad)
        await broadcaster.broadcast("order_updated", {})

    asyncio.run(scenario())
    assert broadcaster.connections == [good]
    assert len(good.sent) == 1
