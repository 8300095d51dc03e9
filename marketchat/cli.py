"""CLI interface for MarketChat."""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

import yaml

from marketchat.client import MarketChatClient
from marketchat.core.config import Config, load_config_or_default
from marketchat.core.errors import StorageError
from marketchat.core.logging import setup_logging_from_config
from marketchat.core.result import Result
from marketchat.model.chat import Conversation, Message
from marketchat.runtime.chat import format_last_message_time, participant_label

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


def format_conversation(conversation: Conversation, current_user_id: str | None) -> str:
    """One list line: counterpart, unread badge, last message and its age."""
    name = participant_label(conversation.other_participant(current_user_id))
    badge = f" ({conversation.unread_count})" if conversation.unread_count else ""
    last = conversation.last_message
    preview = last.text if last else "No messages yet"
    when = format_last_message_time(last.timestamp if last else conversation.updated_at)
    return f"{conversation.id}  {name}{badge}  {preview}  [{when}]"


def format_message(message: Message, current_user_id: str | None) -> str:
    sender = "You" if message.sender_id == current_user_id else participant_label(message.sender_id)
    marker = "" if message.is_read else " *"
    return f"[{message.timestamp:%Y-%m-%d %H:%M}] {sender}: {message.text}{marker}"


def report(result: Result) -> int:
    """Print a failure to stderr and map the result to an exit code."""
    if result.ok:
        return 0
    print(f"Error: {result.failure.message}", file=sys.stderr)
    return 1


def require_session(client: MarketChatClient) -> bool:
    if client.session.is_authenticated:
        return True
    print("Not signed in. Run 'marketchat login' first.", file=sys.stderr)
    return False


async def run_command(args: argparse.Namespace, client: MarketChatClient) -> int:
    """Execute one subcommand against a started client.

    Returns:
        Process exit code.
    """
    session = client.session
    chat = client.chat

    if args.command == "status":
        user = session.current_user
        if user is None:
            print("Signed out")
        else:
            print(f"Signed in as {user.display_name} <{user.email}>")
        return 0

    if args.command == "login":
        email = args.email or input("Email: ")
        password = getpass.getpass("Password: ")
        result = await session.login(email, password)
        if result.ok:
            print(f"Signed in as {result.value.display_name}")
        return report(result)

    if args.command == "logout":
        await session.logout()
        print("Signed out")
        return 0

    if args.command == "forgot-password":
        result = await session.forgot_password(args.email)
        if result.ok:
            print(f"Password reset instructions sent to {args.email}")
        return report(result)

    if not require_session(client):
        return 1
    user_id = session.current_user.id

    if args.command == "conversations":
        result = await chat.fetch_conversations()
        if not result.ok:
            return report(result)
        conversations = chat.search(args.search) if args.search else chat.conversations
        if not conversations:
            print("No conversations found")
        for conversation in conversations:
            print(format_conversation(conversation, user_id))
        print(f"{chat.total_unread} unread")
        return 0

    if args.command == "messages":
        result = await chat.fetch_messages(args.conversation_id)
        if not result.ok:
            return report(result)
        for message in chat.messages:
            print(format_message(message, user_id))
        return 0

    if args.command == "send":
        result = await chat.send_message(
            args.text,
            args.receiver_id,
            conversation_id=args.conversation,
            product_id=args.product,
        )
        if result.ok:
            print(f"Sent message {result.value.id}")
        return report(result)

    if args.command == "read":
        result = await chat.mark_as_read(args.conversation_id)
        if result.ok:
            print(f"Marked {args.conversation_id} as read")
        return report(result)

    logger.error(f"Unknown command: {args.command}")
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MarketChat - marketplace chat client")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to configuration file (defaults are used if it does not exist)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    subparsers.add_parser("status", help="Show the stored session")

    login_parser = subparsers.add_parser("login", help="Sign in (prompts for the password)")
    login_parser.add_argument("email", nargs="?", help="Account email")

    subparsers.add_parser("logout", help="Sign out and forget stored credentials")

    conversations_parser = subparsers.add_parser("conversations", help="List conversations")
    conversations_parser.add_argument(
        "-s",
        "--search",
        type=str,
        help="Only show conversations whose participant name contains this text",
    )

    messages_parser = subparsers.add_parser("messages", help="Show a conversation's messages")
    messages_parser.add_argument("conversation_id", help="Conversation ID")

    send_parser = subparsers.add_parser("send", help="Send a text message")
    send_parser.add_argument("receiver_id", help="Receiving user ID")
    send_parser.add_argument("text", help="Message text")
    send_parser.add_argument("--conversation", type=str, metavar="ID", help="Existing conversation ID")
    send_parser.add_argument("--product", type=str, metavar="ID", help="Product the message is about")

    read_parser = subparsers.add_parser("read", help="Mark a conversation as read")
    read_parser.add_argument("conversation_id", help="Conversation ID")

    forgot_parser = subparsers.add_parser("forgot-password", help="Request a password reset email")
    forgot_parser.add_argument("email", help="Account email")

    return parser


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    config: Config = load_config_or_default(args.config)
    setup_logging_from_config(config.logging, level_override="DEBUG" if args.verbose else None)

    async with MarketChatClient(config) as client:
        return await run_command(args, client)


def run() -> None:
    """Entry point for poetry scripts."""
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        return
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Invalid YAML in configuration: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except StorageError as e:
        print(f"Credential storage error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Startup failed: {e} (run with -v for details)", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    run()
