import logging
from typing import Iterable

import pika

from .amqp import Channel, ConnectionError, TerminatedConsumption
from .common import Message
from .utils import retry_on_connection_error

__all__ = [
    'ManagedChannel',
    'create_managed_channel',
]

_LOGGER = logging.getLogger(__name__)


class ManagedChannel(Channel):
    """A RabbitMQ channel that reopens its connection when needed

    Accepts the same parameters as :class:`~flask_amqpkit.amqp.Channel`, plus:

    :param reconnect_min_wait: The number of seconds to wait before
      the first reconnection attempt
    :param reconnect_max_wait: The maximal number of seconds to wait
      between reconnection attempts
    :param max_reconnects: The maximal number of consecutive failed
      reconnection attempts. `None` (the default) means "try forever".

    Before every use, if the connection has been closed for some
    reason, a new connection will be opened, and the `setup` function
    will be called again. A lost connection interrupts neither
    publishing, nor consumption: the failed publish is retried once,
    and the consumption is resumed. Note that this means that
    messages may be delivered more than once.
    """

    def __init__(self, url, *, reconnect_min_wait=0.5, reconnect_max_wait=30.0, max_reconnects=None, **kwargs):
        super().__init__(url, **kwargs)
        assert reconnect_min_wait >= 0
        assert reconnect_max_wait >= reconnect_min_wait
        assert max_reconnects is None or max_reconnects >= 0
        self.reconnect_min_wait = reconnect_min_wait
        self.reconnect_max_wait = reconnect_max_wait
        self.max_reconnects = max_reconnects
        self._consuming = False
        retry = retry_on_connection_error(
            retries=max_reconnects,
            min_wait=reconnect_min_wait,
            max_wait=reconnect_max_wait,
            should_stop=lambda: self._consuming and self._stopped,
        )
        self._connect_with_retry = retry(self._connect)

    @property
    def pika_channel(self):
        self.ensure_open()
        return self._pika_channel

    def open(self):
        """Try to open a new connection and a new channel.

        Unlike :meth:`Channel.open`, this method does not raise an
        error if the connection can not be established. The next
        attempt will be made on first use.
        """

        try:
            super().open()
        except ConnectionError as e:
            _LOGGER.warning('Can not open a channel now (%s), will retry on first use.', e)

    def ensure_open(self):
        """Reopen the connection and the channel, if they are closed.

        :raises ConnectionError: if `max_reconnects` consecutive
          reconnection attempts have failed
        """

        if self.is_open:
            return
        self._kill_connection()
        try:
            self._connect_with_retry()
        except pika.exceptions.AMQPConnectionError as e:
            raise ConnectionError(e) from e

    def publish_messages(self, messages: Iterable[Message], *, allow_retry: bool = True):
        """Publish messages, waiting for delivery confirmations.

        If the connection has been lost during the publishing, a new
        connection will be opened, and all the messages will be
        published again, but only once.
        """

        message_list = messages if isinstance(messages, list) else list(messages)
        if len(message_list) == 0:
            return

        self.ensure_open()
        try:
            super().publish_messages(message_list)
        except ConnectionError:
            if not allow_retry:
                raise
            _LOGGER.debug('Re-executing publish_messages()')
            self._kill_connection()
            self.publish_messages(message_list, allow_retry=False)

    def consume(self, queue, on_message, *, threads=1, inactivity_timeout=1.0):
        """Start consuming messages from `queue`.

        This method blocks and never returns normally. It raises
        `TerminatedConsumption` when the `stop` method has been
        called, when `on_message` has raised an exception, or when
        the connection could not be reopened.
        """

        self._stopped = False
        self._worker_error = None
        self._consuming = True
        try:
            while not self._stopped:
                try:
                    self.ensure_open()
                except ConnectionError as e:
                    if self._stopped:
                        break
                    raise TerminatedConsumption() from e

                try:
                    self._consume_once(queue, on_message, threads, inactivity_timeout)
                except ConnectionError:
                    self._kill_connection()
                    continue
                break
        finally:
            self._consuming = False

        raise TerminatedConsumption()


def create_managed_channel(url, *, setup=None, reconnect_min_wait=0.5, reconnect_max_wait=30.0,
                           max_reconnects=None, **channel_options):
    """Create a channel that automatically reconnects to the RabbitMQ server.

    :param url: RabbitMQ's connection URL
    :param setup: An optional function that will be called with the
      `pika` channel as an argument, every time a new channel is opened
    :return: A :class:`ManagedChannel`

    This function does not fail if the server is not reachable at
    the moment. For the other parameters, see :class:`ManagedChannel`.
    """

    channel = ManagedChannel(
        url,
        setup=setup,
        reconnect_min_wait=reconnect_min_wait,
        reconnect_max_wait=reconnect_max_wait,
        max_reconnects=max_reconnects,
        **channel_options
    )
    channel.open()
    return channel
