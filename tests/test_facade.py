import pytest
import flask_amqpkit
from flask_amqpkit import amqp, managed, parsing

EXPORTS = {
    'create_channel': amqp.create_channel,
    'create_managed_channel': managed.create_managed_channel,
    'consume_from': amqp.consume_from,
    'publish_to': amqp.publish_to,
    'parse_and_handle_message': parsing.parse_and_handle_message,
    'default_parse_and_handle_message': parsing.default_parse_and_handle_message,
    'parse_json_message': parsing.parse_json_message,
}


@pytest.mark.parametrize('name', sorted(EXPORTS))
def test_exported_names(name):
    assert name in flask_amqpkit.__all__
    exported = getattr(flask_amqpkit, name)
    assert exported is not None
    assert callable(exported)
    assert exported is EXPORTS[name]
    assert getattr(flask_amqpkit.api, name) is exported


def test_all_names_are_exported():
    assert set(flask_amqpkit.__all__) == set(EXPORTS)
    assert set(flask_amqpkit.api._fields) == set(EXPORTS)


def test_api_is_immutable():
    with pytest.raises(AttributeError):
        flask_amqpkit.api.create_channel = None


def test_managed_and_unmanaged_channels_differ():
    assert flask_amqpkit.create_channel is not flask_amqpkit.create_managed_channel


def test_errors_propagate_unchanged(BlockingConnection):
    BlockingConnection.side_effect = amqp.pika.exceptions.AMQPConnectionError('refused')
    with pytest.raises(amqp.ConnectionError) as direct:
        amqp.create_channel('amqp://localhost')
    with pytest.raises(amqp.ConnectionError) as via_facade:
        flask_amqpkit.create_channel('amqp://localhost')
    assert type(direct.value) is type(via_facade.value)
    assert str(direct.value) == str(via_facade.value)


def test_parse_errors_propagate_unchanged(make_delivery):
    delivery = make_delivery(b'not json')
    with pytest.raises(parsing.MessageParseError):
        flask_amqpkit.parse_json_message(delivery)
