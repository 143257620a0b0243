"""High-level async engine for language-server quota telemetry."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from agtelemetry._api.user_status import fetch_user_status
from agtelemetry._constants import SIGNAL_DECAY, SIGNAL_FULL
from agtelemetry._redact import redact_for_log
from agtelemetry._scheduler import PeriodicScanner
from agtelemetry._system import SystemProbe, system_probe_for_platform
from agtelemetry._transport import LoopbackTransport, Transport
from agtelemetry.assessment import assess_overall_readiness, count_active_alerts
from agtelemetry.config import TelemetryConfig, normalize_scan_interval
from agtelemetry.discovery.beacon import locate_beacon
from agtelemetry.discovery.ports import scan_frequencies
from agtelemetry.discovery.prober import find_active_port
from agtelemetry.exceptions import AgtDiscoveryError, AgtError, AgtPortExhaustionError, AgtSchemaError
from agtelemetry.ingestion.fuel import normalize_model_configs
from agtelemetry.ingestion.normalize import mask_token
from agtelemetry.ingestion.validate import extract_model_configs, validate_server_response
from agtelemetry.models.fuel import TelemetrySnapshot
from agtelemetry.models.thresholds import AlertThresholds, is_valid_alert_thresholds
from agtelemetry.models.uplink import UplinkState
from agtelemetry.models.validation import ValidationResult
from agtelemetry.state.bus import EventBus, EventCallback
from agtelemetry.state.events import (
    FailureReason,
    ScanCompleted,
    ScanPhase,
    ScanStarted,
    TelemetryReceived,
    UplinkEstablished,
    UplinkLost,
)
from agtelemetry.state.governor import FailureGovernor

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TelemetryClient:
    """Discovers the local language server and polls it for quota data.

    One instance owns the uplink state, the failure counter, the event
    bus and the scan timer; several instances can coexist. No public
    method raises: failures come back as ``None``/``False`` and are
    reported through events.

    Usage::

        async with TelemetryClient(TelemetryConfig.from_env()) as client:
            client.subscribe(print)
            snapshot = await client.acquire_telemetry()
            client.start_periodic_scans()
    """

    def __init__(
        self,
        config: TelemetryConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        system: SystemProbe | None = None,
        transport: Transport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or TelemetryConfig()
        self._thresholds = self._config.thresholds
        self._scan_interval = normalize_scan_interval(self._config.scan_interval)
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport is not None
        self._transport = transport
        self._system = system or system_probe_for_platform(process_pattern=self._config.process_pattern)
        self._clock = clock
        self._bus = EventBus()
        self._governor = FailureGovernor(self._bus, self._config.failure_threshold, clock=clock)
        self._uplink = UplinkState()
        self._scanner = PeriodicScanner(self.acquire_telemetry)
        self._inflight: asyncio.Task[TelemetrySnapshot | None] | None = None
        self._establishing: asyncio.Task[bool] | None = None
        self._last_snapshot: TelemetrySnapshot | None = None
        self._last_response: Any = None
        self._last_validation: ValidationResult | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TelemetryClient:
        if self._transport is None:
            if self._http_session is None:
                # Every probe and fetch opens a fresh connection.
                self._http_session = aiohttp.ClientSession(connector=aiohttp.TCPConnector(force_close=True))
            self._transport = LoopbackTransport(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop scanning, drop subscribers and release the HTTP session."""
        self._scanner.stop()
        self._bus.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._injected_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Events and state
    # ------------------------------------------------------------------

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register an event callback; call the returned handle to unsubscribe."""
        return self._bus.subscribe(callback)

    def get_uplink_state(self) -> UplinkState:
        return self._uplink.model_copy()

    @property
    def last_snapshot(self) -> TelemetrySnapshot | None:
        return self._last_snapshot

    @property
    def thresholds(self) -> AlertThresholds:
        return self._thresholds

    @property
    def consecutive_failures(self) -> int:
        return self._governor.consecutive_failures

    @property
    def scan_interval(self) -> float:
        return self._scan_interval

    @property
    def is_scanning(self) -> bool:
        return self._scanner.is_running

    # ------------------------------------------------------------------
    # Uplink
    # ------------------------------------------------------------------

    async def _discover(self, transport: Transport) -> tuple[int, str]:
        credential = await locate_beacon(self._system)
        if credential is None:
            raise AgtDiscoveryError("No language-server process with a CSRF token found")
        ports = await scan_frequencies(self._system, credential.pid)
        port = await find_active_port(transport, ports, credential.token, ide_name=self._config.ide_name)
        if port is None:
            raise AgtPortExhaustionError(f"No responsive port among {len(ports)} candidates for pid {credential.pid}")
        return port, credential.token

    def _lose_uplink(self, reason: str) -> bool:
        self._uplink = UplinkState(last_contact_at=self._uplink.last_contact_at)
        self._bus.emit(UplinkLost(reason=reason, timestamp=self._clock()))
        return False

    async def establish_uplink(self) -> bool:
        """Locate the process, find its port and mark the uplink connected.

        Concurrent callers, including an acquisition cycle that is
        reconnecting, share the discovery already in flight.
        """
        establishing = self._establishing
        if establishing is None or establishing.done():
            establishing = asyncio.ensure_future(self._establish())
            self._establishing = establishing
        return await asyncio.shield(establishing)

    async def _establish(self) -> bool:
        self._bus.emit(ScanStarted(phase=ScanPhase.ESTABLISH, timestamp=self._clock()))
        if self._transport is None:
            _logger.debug("establish_uplink called outside 'async with TelemetryClient(...)'")
            return self._lose_uplink("client not initialized")
        try:
            port, token = await self._discover(self._transport)
        except (AgtDiscoveryError, AgtPortExhaustionError) as exc:
            _logger.debug("Uplink not established: %s", exc)
            return self._lose_uplink(str(exc))
        except Exception as exc:
            _logger.debug("Uplink discovery failed", exc_info=True)
            return self._lose_uplink(f"{type(exc).__name__}: {exc}")

        self._uplink = UplinkState(
            connected=True,
            port=port,
            token=token,
            last_contact_at=self._clock(),
            signal_strength=SIGNAL_FULL,
        )
        _logger.info("Uplink established on port %d (token %s)", port, mask_token(token))
        self._bus.emit(UplinkEstablished(port=port, timestamp=self._clock()))
        return True

    def degrade(self) -> None:
        """Lower signal strength by 25; at zero the uplink is dropped."""
        self._uplink.signal_strength = max(0, self._uplink.signal_strength - SIGNAL_DECAY)
        if self._uplink.signal_strength == 0 and self._uplink.connected:
            _logger.info("Uplink lost after repeated failures")
            self._lose_uplink("signal lost")

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    async def acquire_telemetry(self) -> TelemetrySnapshot | None:
        """Run one acquisition cycle and return the new snapshot, or ``None``.

        Concurrent callers share the cycle already in flight.
        """
        inflight = self._inflight
        if inflight is None or inflight.done():
            inflight = asyncio.ensure_future(self._acquire_cycle())
            self._inflight = inflight
        return await asyncio.shield(inflight)

    def _fail(self, reason: FailureReason, message: str) -> None:
        self.degrade()
        self._governor.track(reason, message)

    async def _acquire_cycle(self) -> TelemetrySnapshot | None:
        if not self._uplink.is_usable:
            if not await self.establish_uplink():
                self._governor.track(FailureReason.UPLINK_FAILED, "Could not establish uplink")
                return None

        self._bus.emit(ScanStarted(phase=ScanPhase.ACQUIRE, timestamp=self._clock()))
        port = self._uplink.port
        token = self._uplink.token
        try:
            if self._transport is None or port is None or token is None:
                raise AgtError("Uplink lost its transport, port or token")
            data = await fetch_user_status(self._transport, port, token, ide_name=self._config.ide_name)
            if data is None:
                self._fail(FailureReason.NO_RESPONSE, f"No usable response from port {port}")
                return None

            self._last_response = data
            result = validate_server_response(data)
            self._last_validation = result
            for warning in result.warnings:
                _logger.debug("Telemetry payload warning: %s", warning)
            if not result.valid:
                raise AgtSchemaError("; ".join(result.errors), result=result)

            systems = normalize_model_configs(extract_model_configs(data), self._thresholds)
            snapshot = TelemetrySnapshot(
                timestamp=self._clock(),
                systems=tuple(systems),
                overall_readiness=assess_overall_readiness(systems),
                active_alert_count=count_active_alerts(systems),
            )
        except AgtSchemaError as exc:
            keys = list(exc.result.received_keys) if exc.result is not None else []
            _logger.debug("Telemetry payload rejected: %s (keys: %s)", exc, keys)
            self._fail(FailureReason.SCHEMA_INVALID, str(exc))
            return None
        except Exception as exc:
            _logger.debug("Telemetry acquisition failed", exc_info=True)
            self._fail(FailureReason.EXCEPTION, f"{type(exc).__name__}: {exc}")
            return None

        self._uplink.signal_strength = SIGNAL_FULL
        self._uplink.last_contact_at = snapshot.timestamp
        self._governor.record_success()
        self._last_snapshot = snapshot

        self._bus.emit(TelemetryReceived(snapshot=snapshot, timestamp=snapshot.timestamp))
        self._bus.emit(
            ScanCompleted(
                system_count=len(snapshot.systems),
                overall_readiness=snapshot.overall_readiness,
                timestamp=snapshot.timestamp,
            )
        )
        return snapshot

    # ------------------------------------------------------------------
    # Scheduling and runtime configuration
    # ------------------------------------------------------------------

    def start_periodic_scans(self, interval_seconds: float | None = None) -> bool:
        """Start (or restart) periodic acquisition.

        The interval is clamped into ``[30, 86400]`` seconds; any previous
        schedule is replaced. Returns ``False`` without a running loop.
        """
        if interval_seconds is not None:
            self._scan_interval = normalize_scan_interval(interval_seconds)
        try:
            self._scanner.start(self._scan_interval)
        except RuntimeError:
            _logger.warning("start_periodic_scans requires a running event loop")
            return False
        return True

    def stop_periodic_scans(self) -> None:
        self._scanner.stop()

    def update_scan_interval(self, interval_seconds: float) -> None:
        """Change the scan interval, restarting the schedule if it is running."""
        self._scan_interval = normalize_scan_interval(interval_seconds)
        if self._scanner.is_running:
            self.start_periodic_scans()

    def update_thresholds(self, thresholds: AlertThresholds | Mapping[str, Any]) -> bool:
        """Swap alert thresholds without reconnecting.

        Takes effect on the next acquisition. Invalid thresholds are
        rejected and the current ones kept.
        """
        if not is_valid_alert_thresholds(thresholds):
            _logger.warning("Ignoring invalid alert thresholds: %r", thresholds)
            return False
        if not isinstance(thresholds, AlertThresholds):
            # Settings mappings may carry unrelated keys.
            thresholds = AlertThresholds(**{key: thresholds[key] for key in ("caution", "warning", "critical")})
        self._thresholds = thresholds
        return True

    def reset_failure_counter(self) -> None:
        self._governor.reset()

    def diagnostics(self) -> dict[str, Any]:
        """Size-capped, redacted view of the engine's internal state."""
        uplink = self._uplink.model_dump(exclude={"token"})
        uplink["token"] = mask_token(self._uplink.token)
        validation = self._last_validation
        return {
            "uplink": uplink,
            "consecutive_failures": self._governor.consecutive_failures,
            "last_failure_reason": self._governor.last_reason,
            "scan_interval": self._scan_interval,
            "scanning": self._scanner.is_running,
            "thresholds": self._thresholds.model_dump(),
            "last_validation": (
                redact_for_log(validation.model_dump(), max_string=256, max_items=20) if validation else None
            ),
            "last_response": redact_for_log(self._last_response, max_string=256, max_items=20),
        }
