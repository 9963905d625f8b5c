"""
Helpers for creating RabbitMQ channels, consuming and publishing
messages, and parsing received messages.
"""

from .amqp import create_channel, consume_from, publish_to
from .managed import create_managed_channel
from .parsing import parse_and_handle_message, default_parse_and_handle_message, parse_json_message
from .api import AMQPApi
from .amqpkit import AMQPKit  # noqa: F401

__all__ = [
    'create_channel',
    'create_managed_channel',
    'consume_from',
    'publish_to',
    'parse_and_handle_message',
    'default_parse_and_handle_message',
    'parse_json_message',
]

api = AMQPApi(
    create_channel=create_channel,
    create_managed_channel=create_managed_channel,
    consume_from=consume_from,
    publish_to=publish_to,
    parse_and_handle_message=parse_and_handle_message,
    default_parse_and_handle_message=default_parse_and_handle_message,
    parse_json_message=parse_json_message,
)
