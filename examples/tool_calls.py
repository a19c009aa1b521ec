import asyncio
import os
from collections.abc import Callable

from groq_chat.client import Chat
from groq_chat.types import Message, Tool

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "configuration": {
            "type": "string",
            "description": "The configuration to send to the switch",
        }
    },
    "required": ["configuration"],
}


def configure_cisco_switch(arguments: str) -> str:
    print(arguments)
    return "configuration applied to cisco switch"


def configure_juniper_switch(arguments: str) -> str:
    print(arguments)
    return "configuration applied to juniper switch"


HANDLERS: dict[str, Callable[[str], str]] = {
    "configure_cisco_switch": configure_cisco_switch,
    "configure_juniper_switch": configure_juniper_switch,
}


async def main() -> None:
    chat = Chat(os.environ["GROQ_API_KEY"], "llama-3.3-70b-versatile")
    chat.add_message(
        Message.system(
            "You generate network configuration commands for the requested device. "
            "Respond with a function call from the list of tools."
        )
    )
    chat.add_message(Message.user("configure unnumbered bgp on the cisco nexus 9000 using Ethernet1/1"))
    chat.set_tool_choice("required")
    chat.add_tool(
        Tool.function_tool(
            "configure_cisco_switch",
            "Sends a configuration to a Cisco Nexus 9000 switch",
            CONFIG_SCHEMA,
        )
    )
    chat.add_tool(
        Tool.function_tool(
            "configure_juniper_switch",
            "Sends a configuration to a Juniper QFX switch",
            CONFIG_SCHEMA,
        )
    )

    while True:
        response = await chat.send()
        message = response.first_message
        if not message.tool_calls:
            print(message.content)
            break

        chat.add_message(message)
        for call in message.tool_calls:
            handler = HANDLERS.get(call.function.name)
            if handler is None:
                result = f"unknown function: {call.function.name}"
            else:
                result = handler(call.function.arguments)
            chat.add_message(Message.tool(result, call.id))
        # let the model answer in prose once the tools have run
        chat.set_tool_choice("auto")


if __name__ == "__main__":
    asyncio.run(main())
