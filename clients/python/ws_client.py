import asyncio
import websockets
import json

async def main():
    async with websockets.connect('ws://localhost:8080/ws') as ws:
        await ws.send(json.dumps({'action': 'subscribe', 'view': 'live'}))
        print(await ws.recv())
        # the server pushes an update whenever the live view changes state
        async for raw in ws:
            msg = json.loads(raw)
            if msg.get('type') != 'update':
                continue
            live = msg['data']
            if live.get('status') == 'loading':
                continue
            for row in live.get('rows', []):
                print(f"{row['sensorId']:>12}  {row.get('temperature')}°C  {row.get('humidity')}%  "
                      f"{row.get('compostPhase')}  {row['displayTime']}")
            if live.get('error'):
                print(live['error'])

if __name__ == '__main__':
    asyncio.run(main())
