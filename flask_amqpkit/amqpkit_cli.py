import sys
import signal
import logging
import click
from flask.cli import with_appcontext
from flask import current_app
from .amqp import DeliveryError, TerminatedConsumption, publish_to
from .common import MessageProperties
from .parsing import default_parse_and_handle_message


@click.group()
def amqp():
    """Perform AMQP operations."""


@amqp.command()
@with_appcontext
@click.option('-t', '--threads', type=int, help='The number of worker threads.'
              ' The default is the value of the "AMQPKIT_THREADS" setting.')
@click.option('--unmanaged', is_flag=True, help='Stop consuming when the connection is lost,'
              ' instead of reconnecting.')
@click.argument('queue')
def consume(queue, threads, unmanaged):
    """Consume messages from QUEUE.

    Each message is decoded as JSON, and the "message_received" signal
    is sent. Malformed messages are rejected. The command runs until
    it receives SIGINT or SIGTERM.

    """

    amqpkit = current_app.extensions['amqpkit']
    logger = logging.getLogger(__name__)
    try:
        channel = amqpkit.create_channel() if unmanaged else amqpkit.create_managed_channel()
    except DeliveryError:
        logger.exception('Caught error while opening a channel.')
        sys.exit(1)

    error = None
    old_sigint = signal.signal(signal.SIGINT, channel.stop)
    old_sigterm = signal.signal(signal.SIGTERM, channel.stop)
    try:
        amqpkit.consume(channel, queue, default_parse_and_handle_message, threads=threads)
    except TerminatedConsumption as e:
        error = e.__cause__
    finally:
        signal.signal(signal.SIGINT, old_sigint)
        signal.signal(signal.SIGTERM, old_sigterm)
        channel.close()

    if error is not None:
        logger.error('Caught error while consuming from "%s".', queue, exc_info=error)
        sys.exit(1)
    logger.info('Stopped consuming from "%s".', queue)


@amqp.command()
@with_appcontext
@click.option('-c', '--content-type', default='application/json', show_default=True,
              help='The content type of the message.')
@click.option('--persistent/--transient', default=True, help='Whether the message should'
              ' survive a broker restart. The default is "--persistent".')
@click.option('-m', '--mandatory', is_flag=True, help='Fail if the message can not be routed to a queue.')
@click.argument('exchange')
@click.argument('routing_key')
@click.argument('body')
def publish(exchange, routing_key, body, content_type, persistent, mandatory):
    """Publish a message with BODY to EXCHANGE.

    To publish directly to a queue, pass "" as EXCHANGE, and the name
    of the queue as ROUTING_KEY.

    """

    amqpkit = current_app.extensions['amqpkit']
    logger = logging.getLogger(__name__)
    properties = MessageProperties(
        content_type=content_type,
        delivery_mode=2 if persistent else 1,
    )
    try:
        channel = amqpkit.create_channel()
        try:
            publish_to(channel, exchange, routing_key, body.encode('utf-8'),
                       properties=properties, mandatory=mandatory)
        finally:
            channel.close()
    except DeliveryError:
        logger.exception('Caught error while publishing a message.')
        sys.exit(1)

    click.echo('The message has been successfully published.')
