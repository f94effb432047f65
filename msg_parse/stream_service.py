"""Kafka stream processor that stamps raw events with timestamp and type id"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from confluent_kafka import Consumer, Producer

from msg_parse.azure_schema import AZURE_DEFAULT_TYPE_ID, AZURE_TIMESTAMP_PATHS, AZURE_TYPE_ID_PATHS
from msg_parse.event_processing_service import EventProcessingService
from msg_parse.path_spec import PathSpec, coerce_path_specs

logger = logging.getLogger(__name__)

FLUSH_TIMEOUT_SECONDS = 10.0


class MessageParseService:
    """Kafka stream processor for raw monitoring events"""

    def __init__(self, bootstrap_servers: str, input_topic: str, output_topic: str,
                 group_id: str = 'msg-parse-service',
                 processing_service: Optional[EventProcessingService] = None,
                 consumer=None, producer=None):
        self.bootstrap_servers = bootstrap_servers
        self.input_topic = input_topic
        self.output_topic = output_topic
        self.processing_service = processing_service or EventProcessingService()
        self.running = True
        self.delivered = 0
        self.delivery_failures = 0

        if consumer is None:
            consumer_config = {
                'bootstrap.servers': bootstrap_servers,
                'group.id': group_id,
                'auto.offset.reset': 'earliest',
                'enable.auto.commit': True
            }
            consumer = Consumer(consumer_config)
        self.consumer = consumer
        self.consumer.subscribe([input_topic])

        if producer is None:
            producer = Producer({'bootstrap.servers': bootstrap_servers})
        self.producer = producer

        logger.info(f"Initialized message parse service: input={input_topic}, output={output_topic}")

    def _safely_process_event(self, value: str) -> Optional[List[Dict[str, Any]]]:
        try:
            return self.processing_service.process_records(value)
        except Exception:
            logger.error(f"Unhandled error while processing event payload: {value}", exc_info=True)
            return None

    def _on_delivery(self, err, msg):
        if err:
            self.delivery_failures += 1
            logger.error(f"Could not publish annotated event to {self.output_topic}: {err}")
            return
        self.delivered += 1

    def handle_message(self, msg) -> int:
        """Annotate one consumed Kafka message and publish its events, returning how many were sent"""
        if msg.error():
            logger.error(f"Consumer error: {msg.error()}")
            return 0

        key = msg.key().decode('utf-8') if msg.key() else None
        value = msg.value().decode('utf-8')
        logger.debug(f"Received payload key={key} -> {value}")

        records = self._safely_process_event(value)
        if not records:
            return 0

        for record in records:
            self.producer.produce(
                self.output_topic,
                key=key,
                value=json.dumps(record).encode('utf-8'),
                callback=self._on_delivery
            )
        self.producer.poll(0)
        logger.debug(f"Published {len(records)} annotated events for key={key}")
        return len(records)

    def stop(self):
        self.running = False

    def close(self):
        """Flush pending deliveries and leave the consumer group"""
        undelivered = self.producer.flush(FLUSH_TIMEOUT_SECONDS)
        if undelivered:
            logger.warning(f"{undelivered} annotated events still queued at shutdown")
        self.consumer.close()
        logger.info(
            f"Message parse service stopped: delivered={self.delivered}, "
            f"failed={self.delivery_failures}"
        )

    def process_stream(self):
        """Poll the input topic until stopped or interrupted"""
        logger.info(f"Consuming raw events from {self.input_topic}")
        try:
            while self.running:
                msg = self.consumer.poll(timeout=1.0)
                if msg is not None:
                    self.handle_message(msg)
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
            self.stop()
        finally:
            self.close()


def load_path_specs(env_var: str, default: List[PathSpec]) -> List[PathSpec]:
    """Path specs from a JSON array in the environment, else the default"""
    raw = os.getenv(env_var)
    if not raw:
        return default
    try:
        specs = json.loads(raw)
        if not isinstance(specs, list):
            raise ValueError("expected a JSON array")
        return coerce_path_specs(specs)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring invalid {env_var}: {e}")
        return default


def main():
    """Main entry point"""
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    bootstrap_servers = os.getenv('KAFKA_BOOTSTRAP_SERVERS', 'kafka:9092')
    input_topic = os.getenv('KAFKA_INPUT_TOPIC', 'azure_raw')
    output_topic = os.getenv('KAFKA_OUTPUT_TOPIC', 'parsed_messages')
    group_id = os.getenv('KAFKA_GROUP_ID', 'msg-parse-service')

    processing_service = EventProcessingService(
        ts_paths=load_path_specs('TIMESTAMP_PATHS', AZURE_TIMESTAMP_PATHS),
        type_id_paths=load_path_specs('TYPE_ID_PATHS', AZURE_TYPE_ID_PATHS),
        default_type_id=os.getenv('DEFAULT_TYPE_ID', AZURE_DEFAULT_TYPE_ID),
    )
    service = MessageParseService(bootstrap_servers, input_topic, output_topic,
                                  group_id=group_id, processing_service=processing_service)
    service.process_stream()


if __name__ == '__main__':
    main()
