import json

import pytest

from msg_parse.azure_schema import AZURE_TIMESTAMP_PATHS
from msg_parse.path_spec import PathSpec
from msg_parse.stream_service import MessageParseService, load_path_specs


class FakeMessage:
    def __init__(self, value, key=None, error=None):
        self._value = value
        self._key = key
        self._error = error

    def error(self):
        return self._error

    def key(self):
        return self._key.encode('utf-8') if self._key else None

    def value(self):
        return self._value.encode('utf-8')


class FakeConsumer:
    def __init__(self, messages):
        self.messages = list(messages)
        self.subscribed = None
        self.closed = False

    def subscribe(self, topics):
        self.subscribed = topics

    def poll(self, timeout=None):
        if not self.messages:
            raise KeyboardInterrupt
        return self.messages.pop(0)

    def close(self):
        self.closed = True


class FakeProducer:
    def __init__(self, fail_with=None):
        self.produced = []
        self.fail_with = fail_with
        self.flushed = False

    def produce(self, topic, key=None, value=None, callback=None):
        self.produced.append((topic, key, json.loads(value.decode('utf-8'))))
        if callback:
            callback(self.fail_with, None)

    def poll(self, timeout):
        return 0

    def flush(self, timeout=None):
        self.flushed = True
        return 0


def make_service(messages, producer=None):
    consumer = FakeConsumer(messages)
    producer = producer or FakeProducer()
    service = MessageParseService('localhost:9092', 'raw', 'parsed', consumer=consumer, producer=producer)
    return service, consumer, producer


def test_subscribes_to_input_topic():
    _, consumer, _ = make_service([])
    assert consumer.subscribed == ['raw']


def test_handle_message_publishes_each_record():
    payload = json.dumps({'records': [
        {'time': '2018-12-19T08:18:21.1834546Z', 'category': 'AuditEvent'},
        {'time': 1545207501, 'category': 'Policy'},
    ]})
    service, _, producer = make_service([])
    assert service.handle_message(FakeMessage(payload, key='hub-1')) == 2

    assert [(topic, key) for topic, key, _ in producer.produced] == [('parsed', 'hub-1'), ('parsed', 'hub-1')]
    first = producer.produced[0][2]
    assert first['message_ts'] == 1545207501
    assert first['message_ts_us'] == 183454
    assert first['message_type_id'] == 'AuditEvent'


def test_handle_message_skips_consumer_errors():
    service, _, producer = make_service([])
    assert service.handle_message(FakeMessage('{}', error='broker down')) == 0
    assert producer.produced == []


def test_handle_message_drops_bad_payload():
    service, _, producer = make_service([])
    assert service.handle_message(FakeMessage('not json')) == 0
    assert producer.produced == []


def test_process_stream_until_interrupted():
    messages = [
        FakeMessage(json.dumps({'time': 1545207501183, 'category': 'A'})),
        None,
        FakeMessage('garbage'),
        FakeMessage(json.dumps({'time': 1545207501, 'category': 'B'})),
    ]
    service, consumer, producer = make_service(messages)
    service.process_stream()

    assert [record['message_type_id'] for _, _, record in producer.produced] == ['A', 'B']
    assert consumer.closed
    assert producer.flushed


def test_load_path_specs_from_environment(monkeypatch):
    monkeypatch.setenv('TIMESTAMP_PATHS', '[{"path": ["meta", "ts"]}]')
    assert load_path_specs('TIMESTAMP_PATHS', AZURE_TIMESTAMP_PATHS) == [PathSpec(['meta', 'ts'])]


def test_load_path_specs_unset_uses_default(monkeypatch):
    monkeypatch.delenv('TIMESTAMP_PATHS', raising=False)
    assert load_path_specs('TIMESTAMP_PATHS', AZURE_TIMESTAMP_PATHS) is AZURE_TIMESTAMP_PATHS


@pytest.mark.parametrize('raw', ['{broken', '{"path": ["a"]}', '["a", "b"]'])
def test_load_path_specs_invalid_uses_default(monkeypatch, raw):
    monkeypatch.setenv('TIMESTAMP_PATHS', raw)
    assert load_path_specs('TIMESTAMP_PATHS', AZURE_TIMESTAMP_PATHS) is AZURE_TIMESTAMP_PATHS


def test_delivery_results_are_counted():
    payload = json.dumps({'records': [{'time': 1545207501}, {'time': 1545207502}]})
    service, _, _ = make_service([FakeMessage(payload)])
    service.process_stream()
    assert service.delivered == 2
    assert service.delivery_failures == 0


def test_failed_deliveries_are_counted():
    service, _, _ = make_service([], producer=FakeProducer(fail_with='queue full'))
    service.handle_message(FakeMessage(json.dumps({'time': 1545207501})))
    assert service.delivered == 0
    assert service.delivery_failures == 1


def test_stop_ends_the_loop():
    service, consumer, producer = make_service([FakeMessage(json.dumps({'time': 1545207501}))])
    service.stop()
    service.process_stream()
    assert producer.produced == []
    assert consumer.closed
    assert producer.flushed
