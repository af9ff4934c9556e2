"""
Launcher Sentinel Test Suite
============================

Test Organization
-----------------
- tests/unit/status/   : readiness gate, health checker, presence, poller
- tests/unit/bot/      : Discord event handling and lifecycle
- tests/unit/features/ : prefix commands and cog discovery
- tests/unit/core/     : configuration and logging

Testing Philosophy
------------------
- Fast, isolated tests; HTTP goes to an in-process aiohttp server
- Follow AAA pattern: Arrange, Act, Assert
"""
