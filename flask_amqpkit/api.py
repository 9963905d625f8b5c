from typing import Callable, NamedTuple


class AMQPApi(NamedTuple):
    """The public capabilities of the package, as an immutable record.

    Can be passed by reference to code that should not import
    :mod:`flask_amqpkit` directly. Each field refers to the very same
    function that the package exports under the same name.
    """

    create_channel: Callable
    create_managed_channel: Callable
    consume_from: Callable
    publish_to: Callable
    parse_and_handle_message: Callable
    default_parse_and_handle_message: Callable
    parse_json_message: Callable
