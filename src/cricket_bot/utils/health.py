"""Health check utilities for monitoring service health.

This module provides health check capabilities for the cricket bot:
- Check configuration completeness
- Check that the static explainer and joke tables are readable
- Probe the publication API
- Generate health status reports
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from cricket_bot.models.content import TOPICS
from cricket_bot.utils.async_helpers import RemoteFetchError

if TYPE_CHECKING:
    from cricket_bot.config.schema import BotConfig
    from cricket_bot.core.static_tables import StaticTables
    from cricket_bot.interfaces.content import ContentSource

log = structlog.get_logger()

PROBE_TOPIC = TOPICS[0].filter


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Overall health report."""

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                    "details": c.details,
                }
                for c in self.checks
            ],
            "details": self.details,
        }


class HealthChecker:
    """Performs health checks on the bot's dependencies.

    A failing publication API only degrades the bot, since every content
    flow falls back to a typing-off indicator. Broken configuration or
    unreadable tables make it unhealthy.

    Example:
        checker = HealthChecker(config, content=bot.content)
        report = await checker.run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(
        self,
        config: BotConfig,
        tables: StaticTables | None = None,
        content: ContentSource | None = None,
    ) -> None:
        """Initialize the health checker.

        Args:
            config: Application configuration
            tables: Static tables to check. Built from config if None.
            content: Publication API adapter to probe. The probe is skipped
                if None.
        """
        from cricket_bot.core.static_tables import StaticTables

        self._config = config
        self._tables = tables or StaticTables(
            config.data.explainers_path, config.data.jokes_path
        )
        self._content = content

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks and return a report.

        Returns:
            HealthReport with results of all checks
        """
        log.info("health_check_start")
        start_time = datetime.now(UTC)

        checks: list[CheckResult] = []

        results = await asyncio.gather(
            self._check_config(),
            self._check_static_tables(),
            self._check_content_api(),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                checks.append(
                    CheckResult(
                        name="unknown",
                        status=HealthStatus.UNHEALTHY,
                        message=f"Check failed with exception: {result}",
                    )
                )
            elif isinstance(result, CheckResult):
                checks.append(result)

        if all(c.status == HealthStatus.HEALTHY for c in checks):
            overall_status = HealthStatus.HEALTHY
            healthy = True
        elif any(c.status == HealthStatus.UNHEALTHY for c in checks):
            overall_status = HealthStatus.UNHEALTHY
            healthy = False
        else:
            overall_status = HealthStatus.DEGRADED
            healthy = True

        report = HealthReport(
            healthy=healthy,
            status=overall_status,
            timestamp=start_time,
            checks=checks,
            details={
                "total_checks": len(checks),
                "healthy_checks": sum(1 for c in checks if c.status == HealthStatus.HEALTHY),
                "degraded_checks": sum(1 for c in checks if c.status == HealthStatus.DEGRADED),
                "unhealthy_checks": sum(1 for c in checks if c.status == HealthStatus.UNHEALTHY),
            },
        )

        log.info(
            "health_check_complete",
            healthy=healthy,
            status=overall_status.value,
            checks_run=len(checks),
        )

        return report

    async def _check_config(self) -> CheckResult:
        """Check that the Messenger credentials look usable."""
        messenger = self._config.messenger
        unresolved = [
            name
            for name, value in (
                ("app_secret", messenger.app_secret),
                ("validation_token", messenger.validation_token),
                ("page_access_token", messenger.page_access_token),
            )
            if value.startswith("${")
        ]
        if unresolved:
            return CheckResult(
                name="config",
                status=HealthStatus.UNHEALTHY,
                message="Unresolved Messenger credentials",
                details={"fields": unresolved},
            )

        return CheckResult(
            name="config",
            status=HealthStatus.HEALTHY,
            message="Configuration valid",
            details={
                "strict_signature": messenger.strict_signature,
                "echo_unmatched": self._config.behavior.echo_unmatched,
                "api_version": messenger.api_version,
            },
        )

    async def _check_static_tables(self) -> CheckResult:
        """Check that both tables parse and the joke table is selectable."""
        try:
            explainers = await self._tables.load_explainers()
            jokes = await self._tables.load_jokes()
        except (OSError, ValueError) as e:
            return CheckResult(
                name="static_tables",
                status=HealthStatus.UNHEALTHY,
                message=f"Static table unreadable: {e}",
            )

        details = {"explainers": len(explainers), "jokes": len(jokes)}
        if len(jokes) < 2:
            return CheckResult(
                name="static_tables",
                status=HealthStatus.DEGRADED,
                message="Joke table has no selectable entries",
                details=details,
            )

        return CheckResult(
            name="static_tables",
            status=HealthStatus.HEALTHY,
            message="Static tables loaded",
            details=details,
        )

    async def _check_content_api(self) -> CheckResult:
        """Probe the publication API with a one-document request."""
        if self._content is None:
            return CheckResult(
                name="content_api",
                status=HealthStatus.HEALTHY,
                message="Probe skipped",
            )

        start = time.monotonic()
        try:
            documents = await self._content.latest(PROBE_TOPIC, 1)
        except RemoteFetchError as e:
            return CheckResult(
                name="content_api",
                status=HealthStatus.DEGRADED,
                message=f"Publication API unavailable: {e}",
                latency_ms=(time.monotonic() - start) * 1000,
            )

        return CheckResult(
            name="content_api",
            status=HealthStatus.HEALTHY,
            message="Publication API reachable",
            latency_ms=(time.monotonic() - start) * 1000,
            details={"documents": len(documents)},
        )
