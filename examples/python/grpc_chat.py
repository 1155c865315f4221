"""Example: Keep a gRPC chat stream alive across server restarts."""

import asyncio
import logging

from retrysocket import RetrySocket
from retrysocket.grpc_transport import GrpcStreamTransport

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")


async def main() -> None:
    socket = (
        RetrySocket.builder()
        .transport(GrpcStreamTransport)
        .url("localhost:50051")
        .connection_options({"method": "/chat.Chat/Session"})
        .reconnect({"max_attempts": 10, "interval": 1000})
        .queue_messages(True)
        .build()
    )
    done = asyncio.Event()

    def on_open(info: dict) -> None:
        if info["reconnect"]:
            print(f"Reconnected after {info['retry_attempts_used']} attempts")
        socket.send(b"hello")

    def on_error(err: Exception) -> None:
        print(f"Stream error: {err}")

    def on_close(code: int, reason: str) -> None:
        print(f"Closed ({code}): {reason}")
        done.set()

    socket.on("open", on_open)
    socket.on("message", lambda msg: print(f"Received {msg!r}"))
    socket.on("error", on_error)
    socket.on("close", on_close)
    socket.connect()

    # Sent while connecting; delivered once the stream opens
    socket.send(b"queued before open")

    await done.wait()


if __name__ == "__main__":
    asyncio.run(main())
