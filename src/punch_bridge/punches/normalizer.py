from __future__ import annotations

from datetime import date, datetime, timedelta

import pytz

from ..core.constants import BACKEND_DATETIME_FORMAT, CIVIL_DAY_FORMAT, DEFAULT_DEVICE_TIMEZONE
from ..core.exceptions import ValidationError
from .model import NormalizedTime

_RAW_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M",
)


class TimeNormalizer:
    """Turn device wall-clock readings into UTC instants and civil days.

    The terminal clock is assumed to run on ``device_timezone``. "Today" and
    day grouping are computed in ``operating_timezone`` (defaults to the
    device zone). Conversion uses the zone's standard pytz rules; during a
    DST fold the standard-time reading wins.
    """

    def __init__(self, device_timezone: str = DEFAULT_DEVICE_TIMEZONE, operating_timezone: str | None = None):
        try:
            self._device_tz = pytz.timezone(device_timezone)
            self._operating_tz = pytz.timezone(operating_timezone or device_timezone)
        except pytz.UnknownTimeZoneError as e:
            raise ValidationError(f"Unknown timezone: {e}") from e

    @property
    def device_timezone(self):
        return self._device_tz

    @property
    def operating_timezone(self):
        return self._operating_tz

    def _parse(self, raw: str) -> datetime:
        value = raw.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
        for fmt in _RAW_FORMATS:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
        raise ValidationError(f"Unparseable timestamp: {raw!r}")

    def to_instant(self, raw) -> datetime:
        if isinstance(raw, str):
            raw = self._parse(raw)
        if not isinstance(raw, datetime):
            raise ValidationError(f"Unsupported timestamp value: {raw!r}")

        if raw.tzinfo is None:
            raw = self._device_tz.localize(raw, is_dst=False)
        # Backends store whole seconds.
        return raw.astimezone(pytz.UTC).replace(microsecond=0)

    def normalize(self, raw) -> NormalizedTime:
        instant = self.to_instant(raw)
        return NormalizedTime(instant=instant, civil_day=self.civil_day(instant))

    def civil_day(self, instant: datetime, timezone=None) -> str:
        tz = self._resolve(timezone)
        if instant.tzinfo is None:
            instant = pytz.UTC.localize(instant)
        return instant.astimezone(tz).strftime(CIVIL_DAY_FORMAT)

    def today(self, now: datetime | None = None) -> str:
        return self.civil_day(now or datetime.now(pytz.UTC))

    def day_bounds(self, civil_day: str) -> tuple[datetime, datetime]:
        """Half-open UTC range covering ``civil_day`` in the operating zone."""
        day = datetime.strptime(civil_day, CIVIL_DAY_FORMAT).date()
        start = self._local_midnight(day)
        end = self._local_midnight(day + timedelta(days=1))
        return start, end

    def to_backend(self, instant: datetime) -> str:
        if instant.tzinfo is None:
            instant = pytz.UTC.localize(instant)
        return instant.astimezone(pytz.UTC).strftime(BACKEND_DATETIME_FORMAT)

    def from_backend(self, value) -> datetime:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = datetime.strptime(value.strip(), BACKEND_DATETIME_FORMAT)
            except ValueError as e:
                raise ValidationError(f"Unparseable backend datetime: {value!r}") from e
        else:
            raise ValidationError(f"Unsupported backend datetime: {value!r}")

        if parsed.tzinfo is None:
            return pytz.UTC.localize(parsed)
        return parsed.astimezone(pytz.UTC)

    def to_device_wall_clock(self, instant: datetime) -> datetime:
        """Naive wall-clock reading the terminal should show for ``instant``."""
        return instant.astimezone(self._device_tz).replace(tzinfo=None)

    def _local_midnight(self, day: date) -> datetime:
        local = self._operating_tz.localize(datetime.combine(day, datetime.min.time()), is_dst=False)
        return local.astimezone(pytz.UTC)

    def _resolve(self, timezone):
        if timezone is None:
            return self._operating_tz
        if isinstance(timezone, str):
            return pytz.timezone(timezone)
        return timezone
