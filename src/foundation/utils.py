"""Low-level utilities with no internal dependencies.
"""
import logging
import os
import pathlib

logger = logging.getLogger(__name__)

LOCALTIME = pathlib.Path('/etc/localtime')
TIMEZONE_FILE = pathlib.Path('/etc/timezone')
DEFAULT_TIMEZONE = 'UTC'


def _zone_from_localtime(localtime: pathlib.Path) -> str | None:
    try:
        target = localtime.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        logger.debug(f'Could not resolve {localtime}: {e}')
        return None

    parts = target.parts
    if 'zoneinfo' not in parts:
        return None

    zone = parts[parts.index('zoneinfo') + 1:]
    if zone and zone[0] in {'posix', 'right'}:
        zone = zone[1:]
    return '/'.join(zone) or None


def _zone_from_timezone_file(timezone_file: pathlib.Path) -> str | None:
    try:
        content = timezone_file.read_text()
    except OSError as e:
        logger.debug(f'Could not read {timezone_file}: {e}')
        return None
    return content.strip() or None


def get_default_timezone(localtime: pathlib.Path = LOCALTIME,
                         timezone_file: pathlib.Path = TIMEZONE_FILE) -> str:
    """Name of the process default timezone.

    Resolution order: the `TZ` environment variable, the zoneinfo entry
    `/etc/localtime` links to, the zone named in `/etc/timezone` (for images
    where `/etc/localtime` is a copy rather than a link), then UTC. A `TZ`
    holding a file path is resolved like `/etc/localtime`.
    """
    tz = os.environ.get('TZ', '').lstrip(':')
    if tz and not tz.startswith('/'):
        return tz
    if tz:
        localtime = pathlib.Path(tz)

    return (_zone_from_localtime(localtime)
            or _zone_from_timezone_file(timezone_file)
            or DEFAULT_TIMEZONE)
