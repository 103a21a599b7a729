"""MQTT feed of hive readings.

Every message on the configured topic is decoded as JSON and handed to the
same ingestion operation the HTTP push route uses.
"""

import asyncio
import json
import logging
from typing import Optional
from urllib.parse import urlparse

import aiomqtt

from hive_api.core.errors import HiveApiError
from hive_api.services.ingestion_service import IngestionService

logger = logging.getLogger(__name__)


class MqttSubscriber:
    def __init__(
        self,
        ingestion_service: IngestionService,
        mqtt_url: str,
        topic: str = "metrics",
        client_id: str = "hive-api",
        reconnect_interval: int = 5,
        max_reconnect_interval: int = 60,
    ):
        parsed = urlparse(mqtt_url)
        if not parsed.hostname:
            raise ValueError(f"Invalid MQTT url: {mqtt_url}")

        self.ingestion_service = ingestion_service
        self.hostname = parsed.hostname
        self.port = parsed.port or 1883
        self.username = parsed.username
        self.password = parsed.password
        self.topic = topic
        self.client_id = client_id
        self.reconnect_interval = reconnect_interval
        self.max_reconnect_interval = max_reconnect_interval

        self._listener_task: Optional[asyncio.Task] = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def start(self) -> None:
        logger.info(f"Starting MQTT subscriber on {self.hostname}:{self.port}")
        self._listener_task = asyncio.create_task(
            self._listen_loop(), name="hive-mqtt-listener"
        )

    async def stop(self) -> None:
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
        self._connected = False
        logger.info("MQTT subscriber stopped")

    async def _listen_loop(self) -> None:
        interval = self.reconnect_interval
        while True:
            try:
                async with aiomqtt.Client(
                    hostname=self.hostname,
                    port=self.port,
                    username=self.username,
                    password=self.password,
                    identifier=self.client_id,
                ) as client:
                    await client.subscribe(self.topic, qos=1)
                    self._connected = True
                    interval = self.reconnect_interval
                    logger.info(
                        f"MQTT listening for events on {self.hostname}:{self.port}/{self.topic}"
                    )

                    async for message in client.messages:
                        await self.handle_message(message.payload)

            except aiomqtt.MqttError as e:
                self._connected = False
                logger.error(
                    f"MQTT connection or subscription failed: {e}, retrying in {interval}s"
                )
                await asyncio.sleep(interval)
                interval = min(interval * 2, self.max_reconnect_interval)
            except Exception as e:
                self._connected = False
                logger.error(
                    f"Unexpected MQTT listener error: {e}, retrying in {interval}s",
                    exc_info=True,
                )
                await asyncio.sleep(interval)
                interval = min(interval * 2, self.max_reconnect_interval)

    async def handle_message(self, payload: bytes) -> None:
        """Ingest one raw message. Failures are logged, never raised."""
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            logger.warning(f"Invalid MQTT message payload {payload!r}: {e}")
            return

        try:
            identity = await self.ingestion_service.ingest(data)
        except HiveApiError as e:
            logger.error(f"MQTT ingestion failed: {e}")
            return

        logger.debug(f"Ingested {identity} from MQTT")
