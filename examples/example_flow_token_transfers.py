import asyncio
import logging

from flowpoller.clients.access import AccessAPI
from flowpoller.constants import FLOW_TOKEN_EVENTS, MAINNET_ACCESS_URL
from flowpoller.core.config import PollerConfig
from flowpoller.polling.poller import EventPoller

logging.basicConfig(level=logging.INFO)

config = PollerConfig(max_height_range=250)
RUN_FOR_S = 120


async def consume(sub):
    async for be in sub:
        ev = be.event
        print(f"#{be.block_height} Tx : {ev.transaction_id} => {ev.type} : {ev.key}")


async def main():
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(RUN_FOR_S, stop.set)

    async with AccessAPI(MAINNET_ACCESS_URL) as api:
        poller = EventPoller(api, interval=10.0, config=config)
        sub = poller.subscribe(FLOW_TOKEN_EVENTS)
        consumer = asyncio.create_task(consume(sub))
        try:
            await poller.run(stop)
        finally:
            consumer.cancel()
    print(f"stopped at height {poller.last_height}")


if __name__ == "__main__":
    asyncio.run(main())
