"""DNS resolution probe against each configured resolver."""

import asyncio
import logging
import time

import dns.asyncresolver
import dns.exception

from linkwatch.config import Settings
from linkwatch.probes.base import DnsProbe, DnsResult

logger = logging.getLogger(__name__)


class ResolverDnsProbe(DnsProbe):
    """Issues an uncached A query to every resolver concurrently."""

    async def query_all(self, config: Settings) -> list[DnsResult]:
        return list(
            await asyncio.gather(
                *(
                    self._query(server, config.dns_query_name, config.dns_timeout_seconds)
                    for server in config.dns_servers()
                )
            )
        )

    async def _query(self, server: str, query_name: str, timeout: float) -> DnsResult:
        resolver = dns.asyncresolver.Resolver(configure=False)
        resolver.nameservers = [server]
        resolver.cache = None

        start = time.perf_counter()
        try:
            await resolver.resolve(query_name, "A", lifetime=timeout)
        except dns.exception.Timeout:
            return DnsResult(dns_server=server, query_name=query_name, is_success=False, error="Timeout")
        except (dns.exception.DNSException, ValueError) as e:
            logger.debug("DNS query failed for server %s", server, exc_info=True)
            return DnsResult(
                dns_server=server, query_name=query_name, is_success=False, error=str(e) or type(e).__name__
            )

        return DnsResult(
            dns_server=server,
            query_name=query_name,
            is_success=True,
            latency_ms=(time.perf_counter() - start) * 1000,
        )
