# catalog/events.py
import logging
from typing import Any, List

from .errors import PublishFailed
from .models import ChangeEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """Where product change events go after a successful update/delete."""

    def publish(self, event: ChangeEvent) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def flush(self, timeout: float = 15.0) -> None:
        pass


class NullPublisher(EventPublisher):
    def publish(self, event: ChangeEvent) -> None:
        logger.debug("discarding %s", event)


class EventLog(EventPublisher):
    """Append-only in-process log of change events."""

    def __init__(self):
        self.events: List[ChangeEvent] = []

    def publish(self, event: ChangeEvent) -> None:
        self.events.append(event)
        logger.debug("logged %s", event)

    def clear(self) -> None:
        self.events.clear()


class KafkaPublisher(EventPublisher):
    """Writes events as JSON to a Kafka topic through a confluent-kafka Producer."""

    def __init__(self, producer: Any, topic: str = "product-events", max_buffer_retries: int = 20):
        self._producer = producer
        self.topic = topic
        self.max_buffer_retries = max_buffer_retries

    @staticmethod
    def _on_delivery(err, msg) -> None:
        if err is not None:
            logger.error("delivery to kafka failed: %s", err)

    def publish(self, event: ChangeEvent) -> None:
        value = event.model_dump_json().encode("utf-8")
        attempts = 0
        while True:
            try:
                self._producer.produce(
                    topic=self.topic,
                    key=str(event.product_id),
                    value=value,
                    on_delivery=self._on_delivery,
                )
                break
            except BufferError as e:
                attempts += 1
                if attempts > self.max_buffer_retries:
                    raise PublishFailed("producer queue stayed full", product_id=event.product_id) from e
                # local queue full, let the producer drain it
                self._producer.poll(0.05)
            except Exception as e:
                raise PublishFailed(str(e), product_id=event.product_id) from e
        self._producer.poll(0)

    def flush(self, timeout: float = 15.0) -> None:
        self._producer.flush(timeout)


def build_publisher(settings) -> EventPublisher:
    sink = settings.event_sink.lower()
    if sink == "memory":
        return EventLog()
    if sink == "none":
        return NullPublisher()
    if sink == "kafka":
        from confluent_kafka import Producer

        producer = Producer({"bootstrap.servers": settings.kafka_broker})
        return KafkaPublisher(producer, topic=settings.kafka_topic)
    raise ValueError(f"unknown event sink: {settings.event_sink!r}")
