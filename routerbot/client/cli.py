"""Terminal front end for the assistant.

Usage:
    routerbot-chat --server http://127.0.0.1:8765
    routerbot-chat --conversation <id>

Type ``/new`` to start a new conversation and ``/quit`` to leave.
"""
import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from routerbot.client.session import ChatSession, FileStorage, PageLocation, URL_PARAM

DEFAULT_STORAGE = Path.home() / ".routerbot" / "local_storage.json"


async def _repl(session: ChatSession) -> None:
    session.hydrate()
    if session.conversation_id:
        print(f"Continuing conversation {session.conversation_id}")
    else:
        print("Ask a question about React Router to get started.")

    loop = asyncio.get_running_loop()
    while True:
        try:
            line = await loop.run_in_executor(None, input, "you> ")
        except EOFError:
            break
        command = line.strip()
        if command == "/quit":
            break
        if command == "/new":
            session.new_conversation()
            print("Started a new conversation.")
            continue

        reply = await session.submit(line)
        if reply is not None:
            print(f"ai> {reply.content}\n")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Chat with the React Router assistant")
    parser.add_argument("--server", default="http://127.0.0.1:8765", help="Backend base URL")
    parser.add_argument("--conversation", help="Conversation id to resume")
    parser.add_argument(
        "--storage", type=Path, default=DEFAULT_STORAGE,
        help="File used as local storage for the conversation id",
    )
    parser.add_argument("--timeout", type=float, default=60.0)
    args = parser.parse_args(argv)

    location = PageLocation(f"{args.server.rstrip('/')}/ai")
    if args.conversation:
        location.set_param(URL_PARAM, args.conversation)

    async def run() -> None:
        async with httpx.AsyncClient(base_url=args.server, timeout=args.timeout) as client:
            session = ChatSession(client, FileStorage(args.storage), location)
            await _repl(session)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
