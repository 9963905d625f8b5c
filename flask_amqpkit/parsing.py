"""
Helpers that turn message handlers into `on_message` callbacks,
suitable for :func:`~flask_amqpkit.amqp.consume_from`.
"""

import json
import logging
from blinker import Namespace
from marshmallow import ValidationError
from werkzeug.http import parse_options_header

__all__ = [
    'MessageParseError',
    'message_received',
    'parse_json_message',
    'parse_and_handle_message',
    'default_parse_and_handle_message',
]

_LOGGER = logging.getLogger(__name__)
_signals = Namespace()

message_received = _signals.signal('message-received', doc="""\
Sent by `default_parse_and_handle_message` for each successfully
parsed message. The sender is the message's routing key. Receivers
get the parsed message as `payload`, and the received message as
`delivery`. If a receiver returns `False`, the message will be
rejected.
""")


class MessageParseError(ValueError):
    """The message is malformed and can not be parsed."""


def _get_charset(properties):
    content_type = getattr(properties, 'content_type', None)
    if content_type:
        _, options = parse_options_header(content_type)
        charset = options.get('charset')
        if charset:
            return charset
    return 'utf-8'


def parse_json_message(delivery, schema=None):
    """Decode the body of a received message as JSON.

    :param delivery: A :class:`~flask_amqpkit.common.Delivery` instance
    :param schema: An optional `marshmallow.Schema` instance. If
      passed, the decoded value will be loaded through it.
    :return: The decoded value
    :raises MessageParseError: if the message is malformed
    """

    body = delivery.body
    try:
        text = body if isinstance(body, str) else body.decode(_get_charset(delivery.properties))
        payload = json.loads(text)
    except (LookupError, ValueError) as e:
        raise MessageParseError(f'Invalid JSON message: {e}') from e

    if schema is not None:
        try:
            payload = schema.load(payload)
        except ValidationError as e:
            raise MessageParseError(f'Invalid message: {e.messages}') from e

    return payload


def parse_and_handle_message(parse, handle):
    """Return an `on_message` callback that parses and handles messages.

    :param parse: A function that receives a
      :class:`~flask_amqpkit.common.Delivery` instance, and returns
      the parsed message. It should raise `MessageParseError` if the
      message is malformed.
    :param handle: A function that receives the parsed message and
      the `Delivery` instance.

    Malformed messages are rejected without being passed to
    `handle`. If `handle` returns `False`, the message is rejected,
    otherwise it is acknowledged. Rejected messages are not requeued
    (usually, they will be sent to a "dead letter queue"). Exceptions
    raised by `handle` are not caught, and the message stays
    unacknowledged. For example::

        def handle(payload, delivery):
            if 'id' not in payload:
                return False
            process(payload['id'])

        on_message = parse_and_handle_message(parse_json_message, handle)
        consume_from(channel, 'orders', on_message)
    """

    def on_message(delivery):
        try:
            payload = parse(delivery)
        except MessageParseError as e:
            _LOGGER.warning('Rejecting malformed message %i: %s', delivery.delivery_tag, e)
            delivery.reject(requeue=False)
            return

        if handle(payload, delivery) is False:
            _LOGGER.debug('Rejecting message %i', delivery.delivery_tag)
            delivery.reject(requeue=False)
        else:
            _LOGGER.debug('Acknowledging message %i', delivery.delivery_tag)
            delivery.ack()

    return on_message


def _send_message_received(payload, delivery):
    responses = message_received.send(delivery.routing_key, payload=payload, delivery=delivery)
    if not responses:
        _LOGGER.debug('No receivers for message %i', delivery.delivery_tag)
    return not any(value is False for _, value in responses)


_parse_json_and_send_signal = parse_and_handle_message(parse_json_message, _send_message_received)


def default_parse_and_handle_message(delivery):
    """An `on_message` callback that does not need a handler.

    The message is decoded as JSON, and the `message_received` signal
    is sent. Then the message is acknowledged, unless it is malformed,
    or a signal receiver has returned `False`. For example::

        from flask_amqpkit import default_parse_and_handle_message
        from flask_amqpkit.parsing import message_received

        @message_received.connect_via('orders.created')
        def on_order_created(routing_key, payload, delivery):
            print(payload)

        consume_from(channel, 'orders', default_parse_and_handle_message)
    """

    _parse_json_and_send_signal(delivery)
