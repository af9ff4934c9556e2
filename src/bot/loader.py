"""
Dynamic Feature Cog Loader for Launcher Sentinel

Purpose
-------
Discover and load every feature cog under ``src/features/`` so the command
router is populated without a hardcoded cog list.

Responsibilities
----------------
- Discover all ``*_cog.py`` modules in ``src/features/``
- Validate cog modules before loading (check for ``setup()``)
- Load cogs with timeout protection and per-cog timing
- Log a loading summary

Non-Responsibilities
--------------------
- Cog implementation (handled by feature cogs)
- Bot lifecycle management (handled by BotLifecycle)
"""

from __future__ import annotations

import asyncio
import importlib
import pkgutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoadResult:
    """Result of loading a single cog."""

    name: str
    success: bool
    duration_ms: float
    error: Optional[Exception] = None
    error_type: Optional[str] = None


class FeatureLoader:
    """Discovers and loads ``*_cog`` extensions with timeout protection."""

    BASE_PATH: Path = Path(__file__).parent.parent / "features"
    BASE_PACKAGE: str = "src.features"
    COG_SUFFIX: str = "_cog"

    def __init__(self, bot, load_timeout_seconds: float = 30.0) -> None:
        self.bot = bot
        self.load_timeout_seconds = load_timeout_seconds
        self.load_results: List[LoadResult] = []

    async def load_all_features(self) -> Dict[str, Any]:
        """
        Discover and load all feature cogs.

        Returns:
            Dictionary with ``discovered``, ``loaded`` and ``failed`` counts.
        """
        start_time = time.perf_counter()
        cog_names = self.discover_cogs()

        if not cog_names:
            logger.warning("No cog files discovered", extra={"pattern": f"*{self.COG_SUFFIX}.py"})
            return self._build_stats(start_time)

        logger.info("Discovered feature cogs", extra={"count": len(cog_names), "cogs": cog_names})

        self.load_results = [await self._load_cog_with_timeout(name) for name in cog_names]

        stats = self._build_stats(start_time)
        logger.info(
            "Feature cog loading complete",
            extra={key: stats[key] for key in ("discovered", "loaded", "failed", "total_time_ms")},
        )
        return stats

    def discover_cogs(self) -> List[str]:
        """Return fully qualified names of every ``*_cog`` module."""
        cog_names: List[str] = []

        for _, name, ispkg in pkgutil.walk_packages(
            [str(self.BASE_PATH)],
            prefix=f"{self.BASE_PACKAGE}.",
        ):
            if not ispkg and name.endswith(self.COG_SUFFIX):
                cog_names.append(name)

        return sorted(cog_names)

    async def _load_cog_with_timeout(self, extension_name: str) -> LoadResult:
        start_time = time.perf_counter()

        validation_error = self._validate_cog(extension_name)
        if validation_error:
            logger.error(
                "Cog validation failed",
                extra={"cog_name": extension_name, "error": str(validation_error)},
            )
            return LoadResult(
                name=extension_name,
                success=False,
                duration_ms=0.0,
                error=validation_error,
                error_type="ValidationError",
            )

        try:
            await asyncio.wait_for(
                self.bot.load_extension(extension_name),
                timeout=self.load_timeout_seconds,
            )
        except asyncio.TimeoutError:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Cog load timeout",
                extra={"cog_name": extension_name, "timeout_seconds": self.load_timeout_seconds},
            )
            return LoadResult(
                name=extension_name,
                success=False,
                duration_ms=duration_ms,
                error=TimeoutError(f"Cog loading exceeded {self.load_timeout_seconds}s timeout"),
                error_type="TimeoutError",
            )
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Failed to load cog",
                extra={
                    "cog_name": extension_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return LoadResult(
                name=extension_name,
                success=False,
                duration_ms=duration_ms,
                error=exc,
                error_type=type(exc).__name__,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Cog loaded successfully",
            extra={"cog_name": extension_name, "duration_ms": round(duration_ms, 2)},
        )
        return LoadResult(name=extension_name, success=True, duration_ms=duration_ms)

    def _validate_cog(self, extension_name: str) -> Optional[Exception]:
        """Return an exception if the module cannot be imported or has no setup()."""
        try:
            module = importlib.import_module(extension_name)
        except ImportError as exc:
            return ImportError(f"Cannot import module: {exc}")

        setup_fn = getattr(module, "setup", None)
        if setup_fn is None:
            return ValueError(
                "Missing required setup() function. "
                "Expected: async def setup(bot): await bot.add_cog(YourCog(bot))"
            )
        if not callable(setup_fn):
            return ValueError("setup must be a callable function")

        return None

    def _build_stats(self, start_time: float) -> Dict[str, Any]:
        successful = [r for r in self.load_results if r.success]
        return {
            "total_time_ms": round((time.perf_counter() - start_time) * 1000, 2),
            "discovered": len(self.load_results),
            "loaded": len(successful),
            "failed": len(self.load_results) - len(successful),
            "results": self.load_results,
        }


async def load_all_features(bot) -> Dict[str, Any]:
    """Discover and load all feature cogs from src/features."""
    loader = FeatureLoader(bot)
    return await loader.load_all_features()
