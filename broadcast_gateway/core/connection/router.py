"""
Broadcast Router.

Lifecycle handlers for connect, message and disconnect events, and the
fan-out that relays a message to every open connection except its sender.

Fan-out targets are a registry snapshot taken when the message is handled;
connections opened or closed while the broadcast is in flight are not
affected. Deliveries run in parallel batches and a failure for one target
never affects the others or the sender.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shared.config.logging import get_logger
from broadcast_gateway.components.core.context import preview_payload
from broadcast_gateway.components.core.exceptions import (
    DeliveryError,
    DuplicateRegistrationError,
)

if TYPE_CHECKING:
    from broadcast_gateway.components.connection.registry import ConnectionRegistry
    from broadcast_gateway.components.metrics.collector import MetricsCollector
    from broadcast_gateway.core.connection.transport import Payload, Transport

logger = get_logger(__name__)


@dataclass(frozen=True)
class MessageEvent:
    """One inbound message: opaque payload plus the sender's connection ID."""

    connection_id: str
    payload: "Payload"


@dataclass
class BroadcastResult:
    """Outcome of one fan-out."""

    origin: str
    targets: tuple[str, ...] = ()
    sent: int = 0
    failures: list[DeliveryError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failed_targets(self) -> list[str]:
        return [f.connection_id for f in self.failures]


class BroadcastRouter:
    """
    Dispatches connection lifecycle events to the registry and fans
    messages out through the transport.

    Handlers:
    - on_connect(id): register the connection (DuplicateRegistrationError propagates)
    - on_message(id, payload): deliver payload to every other open connection
    - on_disconnect(id, reason): unregister, no-op for unknown IDs
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        transport: "Transport",
        metrics: "MetricsCollector | None" = None,
        batch_size: int = 50,
    ) -> None:
        """
        Initialize router with dependencies.

        Args:
            registry: Open-connection registry
            transport: Outbound unicast primitive
            metrics: Optional metrics collector
            batch_size: Number of deliveries awaited in parallel
        """
        self._registry = registry
        self._transport = transport
        self._metrics = metrics
        self._batch_size = max(1, batch_size)

    @property
    def registry(self) -> "ConnectionRegistry":
        return self._registry

    # =========================================================================
    # Lifecycle handlers
    # =========================================================================

    def on_connect(self, connection_id: str) -> None:
        """
        Register a newly opened connection.

        Raises:
            DuplicateRegistrationError: If the ID is already open. Only this
                connection attempt is affected.
        """
        try:
            self._registry.register(connection_id)
        except DuplicateRegistrationError:
            if self._metrics:
                self._metrics.increment_connection_rejected_duplicate()
            logger.warning("Duplicate connection registration", target=connection_id)
            raise

        if self._metrics:
            self._metrics.increment_connection_accepted()
        logger.info(
            "Connection opened",
            target=connection_id,
            open_connections=self._registry.size(),
        )

    async def on_message(self, connection_id: str, payload: "Payload") -> BroadcastResult:
        """Relay payload from connection_id to every other open connection."""
        if self._metrics:
            self._metrics.increment_messages_received()
        return await self.broadcast(MessageEvent(connection_id, payload))

    def on_disconnect(self, connection_id: str, reason: str | None = None) -> bool:
        """
        Unregister a closed connection.

        reason is diagnostic only. Unknown IDs are ignored.

        Returns:
            True if the connection was registered, False otherwise.
        """
        removed = self._registry.unregister(connection_id)
        if removed:
            if self._metrics:
                self._metrics.increment_connection_closed()
            logger.info(
                "Connection closed",
                target=connection_id,
                reason=reason,
                open_connections=self._registry.size(),
            )
        return removed

    def shutdown(self) -> int:
        """Clear the registry. Returns the number of connections dropped."""
        cleared = self._registry.clear()
        if cleared:
            logger.info("Registry cleared", connections=cleared)
        return cleared

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def broadcast(self, event: MessageEvent) -> BroadcastResult:
        """
        Deliver one message event to a snapshot of all other connections.

        The sender is excluded by the snapshot itself, so it can never
        receive its own message.
        """
        targets = self._registry.snapshot_except(event.connection_id)
        result = BroadcastResult(origin=event.connection_id, targets=targets)
        if not targets:
            return result

        for i in range(0, len(targets), self._batch_size):
            batch = targets[i : i + self._batch_size]
            outcomes = await asyncio.gather(
                *[self._deliver(target, event.payload) for target in batch],
                return_exceptions=True,
            )
            for target, outcome in zip(batch, outcomes):
                if outcome is True:
                    result.sent += 1
                elif isinstance(outcome, DeliveryError):
                    result.failures.append(outcome)
                else:
                    result.failures.append(DeliveryError(target, repr(outcome)))

        if self._metrics:
            self._metrics.increment_broadcast_total()
            self._metrics.add_sent_recipients(result.sent)
            if result.failures:
                self._metrics.increment_broadcast_failed()
                self._metrics.add_failed_recipients(result.failed)

        if result.failures:
            logger.warning(
                "Broadcast completed with failures",
                origin=event.connection_id,
                sent=result.sent,
                failed=result.failed,
                total=len(targets),
                failed_targets=result.failed_targets,
                reasons={f.connection_id: f.reason for f in result.failures},
            )
        else:
            logger.debug(
                "Broadcast completed",
                origin=event.connection_id,
                sent=result.sent,
                payload=preview_payload(event.payload),
            )
        return result

    async def _deliver(self, target: str, payload: "Payload") -> bool:
        """
        Unicast to one target.

        Raises:
            DeliveryError: If the transport reports failure or raises.
        """
        try:
            delivered = await self._transport.send(target, payload)
        except DeliveryError:
            raise
        except Exception as e:
            raise DeliveryError(target, str(e) or type(e).__name__) from e
        if delivered is not True:
            raise DeliveryError(target, "transport reported failure")
        return True
