from functools import partial
from typing import Any, NamedTuple, Optional

import pika


class MessageProperties(pika.BasicProperties):
    """Basic message properties

    This is an alias for :class:`pika.BasicProperties`.
    """


class Message(NamedTuple):
    """A `typing.NamedTuple` representing a RabbitMQ message to be send

    :param exchange: RabbitMQ exchange name
    :param routing_key: RabbitMQ routing key
    :param body: The message's body
    :param properties: Message properties (see :class:`pika.BasicProperties`)
    :param mandatory: If `True`, requires the message to be added to
      at least one queue.
    """

    exchange: str
    routing_key: str
    body: bytes
    properties: Optional[MessageProperties] = None
    mandatory: bool = False


class Delivery(NamedTuple):
    """A `typing.NamedTuple` representing a received RabbitMQ message

    :param body: The message's body
    :param properties: Message properties
    :param method: The `Basic.Deliver` method frame
    :param pika_channel: The `pika` channel the message was received on
    :param connection: The `pika` connection owning `pika_channel`

    The `ack`, `reject`, and `nack` methods can be called from any
    thread. The actual AMQP command will be issued by the thread that
    owns the connection.
    """

    body: bytes
    properties: Any
    method: Any
    pika_channel: Any
    connection: Any

    @property
    def delivery_tag(self) -> int:
        return self.method.delivery_tag

    @property
    def routing_key(self) -> str:
        return self.method.routing_key

    @property
    def exchange(self) -> str:
        return self.method.exchange

    @property
    def redelivered(self) -> bool:
        return bool(self.method.redelivered)

    def ack(self):
        """Acknowledge the message."""

        self._add_callback(self.pika_channel.basic_ack, delivery_tag=self.delivery_tag)

    def reject(self, requeue=False):
        """Reject the message.

        By default the message is not requeued, so that the broker can
        send it to a "dead letter queue", if one is configured.
        """

        self._add_callback(self.pika_channel.basic_reject, delivery_tag=self.delivery_tag, requeue=requeue)

    def nack(self, requeue=True):
        """Negatively acknowledge the message."""

        self._add_callback(self.pika_channel.basic_nack, delivery_tag=self.delivery_tag, requeue=requeue)

    def _add_callback(self, method, **kwargs):
        self.connection.add_callback_threadsafe(partial(method, **kwargs))
