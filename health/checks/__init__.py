# ============================================================================
# HEALTH CHECK VARIANTS
# ============================================================================
# STATUS: Checks - Built-in probe implementations
# PURPOSE: Concrete checks behind the HealthCheck contract
# CREATED: 03 OCT 2026
# ============================================================================
"""
Health Check Variants

Built-in checks, all sharing the fail-closed HealthCheck.check() contract:
- PingCheck: boolean ping function
- HttpCheck: URL answering with a 2xx status
- TcpCheck: host:port accepting connections
- CustomCheck: function returning (status, message)
"""

from health.checks.ping import PingCheck
from health.checks.http import HttpCheck
from health.checks.tcp import TcpCheck
from health.checks.custom import CustomCheck

__all__ = [
    "PingCheck",
    "HttpCheck",
    "TcpCheck",
    "CustomCheck",
]
