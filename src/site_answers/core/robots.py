from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.robotparser import RobotFileParser

import aiohttp

logger = logging.getLogger(__name__)


@dataclass
class RobotsPolicy:
    parser: RobotFileParser
    # False when robots.txt could not be read and no rules are known.
    loaded: bool = True

    def can_fetch(self, user_agent: str, url: str) -> bool:
        return self.parser.can_fetch(user_agent, url)


def _permissive(parser: RobotFileParser) -> RobotsPolicy:
    # Availability over caution: an unreadable robots.txt means "no disallow rules known".
    parser.parse([])
    return RobotsPolicy(parser, loaded=False)


async def fetch_robots(
    session: aiohttp.ClientSession,
    origin: str,
    user_agent: str,
    *,
    timeout_seconds: float = 20.0,
) -> RobotsPolicy:
    robots_url = origin.rstrip("/") + "/robots.txt"
    parser = RobotFileParser()
    parser.set_url(robots_url)
    try:
        async with session.get(
            robots_url,
            headers={"User-Agent": user_agent},
            timeout=aiohttp.ClientTimeout(total=timeout_seconds),
        ) as resp:
            if resp.status >= 400:
                logger.warning("robots.txt unavailable (status=%s); crawling permissively: %s", resp.status, robots_url)
                return _permissive(parser)
            body = await resp.text(errors="ignore")
            parser.parse(body.splitlines())
            logger.info("robots.txt loaded: %s", robots_url)
            return RobotsPolicy(parser)
    except Exception as e:
        logger.warning("robots.txt fetch error; crawling permissively: %s (%s)", robots_url, e)
        return _permissive(parser)
